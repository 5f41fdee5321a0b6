import os

from setuptools import find_packages, setup

PACKAGE_NAME = 'mpe-channels'


this_directory = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(this_directory, 'README.md'), encoding='utf-8') as f:
    long_description = f.read()


with open(os.path.join(this_directory, "requirements.txt")) as f:
    requirements = [line.strip() for line in f if line.strip()]


version_dict = {}
with open(os.path.join(this_directory, "mpe_channels", "version.py")) as fp:
    exec(fp.read(), version_dict)


setup(
    name=PACKAGE_NAME,
    version=version_dict['__version__'],
    packages=find_packages(include=['mpe_channels', 'mpe_channels.*']),
    description="Payment channel management on top of the MultiPartyEscrow contract",
    long_description=long_description,
    long_description_content_type='text/markdown',
    license="MIT",
    python_requires='>=3.10',
    install_requires=requirements,
    extras_require={
        'test': ['pytest'],
    },
    include_package_data=True,
    entry_points={
        'console_scripts': [
            'mpe-channels = mpe_channels.cli:main',
        ],
    }
)
