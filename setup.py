"""Copy a single local file to an FTP server from the command line

ftpcp uploads exactly one file to the directory given in a compact
'[user@]host[:path]' target. There is no configuration file: the port and the
credentials are given as options or embedded in the target, missing
usernames and passwords are asked for interactively (passwords without echo),
and anonymous logins are supported.

The FTP protocol is handled by the 'ftplib' module of the Python standard
library. The test suite runs against the FTP server from the 'pyftpdlib'
package.

"""

from setuptools import setup

setup(
    name='ftpcp',
    version='1.0.1',
    description=__doc__.splitlines()[0],
    long_description="".join(__doc__.splitlines()[2:]),
    python_requires='>=3.7',
    license='Python Software Foundation License',
    py_modules=[
        'ftpcp',
        'ftpcreds',
        'ftpupload',
    ],
    entry_points={
        'console_scripts': [
            'ftpcp = ftpcp:main',
        ],
    },
    extras_require={
        'test': [
            'pyftpdlib',
            'pytest',
        ],
    },
)
