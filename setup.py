import re
import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

with open("skyIOT/version.py", "r") as fh:
    version = re.search(r"^sdkVersion = '([^']+)'", fh.read(), re.M).group(1)

setuptools.setup(
    name="skyIOT",
    version=version,
    author="dhrone",
    author_email="ron@ritchey.org",
    description="Device registration, remote commands and status reporting for backend connected IOT devices",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["tests"]),
    install_requires=[
        "AWSIoTPythonSDK",
        "boto3",
        "botocore",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.6",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
