from setuptools import find_packages, setup

setup(
    name="ftp-folders",
    version="0.1.0",
    description="Folder and file object model over FTP (and SFTP) connections",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "paramiko>=3.0.0",
    ],
    entry_points={
        "console_scripts": [
            "ftp-folders=ftp_folders.__main__:main",
        ],
    },
    python_requires=">=3.10",
    extras_require={
        "test": [
            "pytest",
            "pyftpdlib",
        ],
        "dev": [
            "pytest",
            "pyftpdlib",
            "build",
            "twine",
        ],
    },
)
