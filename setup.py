#!/usr/bin/env python
import os
import setuptools


os.environ.setdefault('PORTFORWARD_IMPORT_VERSION_ONLY', '1')
import portforward

setuptools.setup(
    name='portforward',
    version=portforward.__version__,
    description='Green TCP port forwarder',
    python_requires=">=3.8.0",
    packages=setuptools.find_packages(exclude=['tests', 'tests.*']),
    install_requires=(
        'eventlet >= 0.33.0',
    ),
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'portforward = portforward.cli:main',
        ],
    },
    zip_safe=False,
    long_description=open(
        os.path.join(
            os.path.dirname(__file__),
            'README.rst'
        )
    ).read(),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: System Administrators",
        "Operating System :: MacOS :: MacOS X",
        "Operating System :: Microsoft :: Windows",
        "Operating System :: POSIX",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python",
        "Topic :: Internet",
        "Topic :: System :: Networking",
    ]
)
