from setuptools import find_packages, setup

setup(
    name="aws-resource-handlers",
    version="0.1.0",
    license="Apache License 2.0",

    python_requires=">=3.12",
    description="Resource handlers for AWS account alternate contacts and "
                "IAM user login profiles with eventual consistency handling.",

    packages=find_packages(exclude=("aws_resources.test", "aws_resources.test.*")),

    install_requires=[
        "Click>=7.0,<9.0",
        "toml>=0.10.0,<0.11.0",
        "boto3>=1.34.0,<2.0",
        "botocore>=1.34.0,<2.0",
        "requests>=2.22.0,<3.0",
        "sentry-sdk>=1.14,<3.0",
        "pydantic>=2.5,<3.0",
    ],

    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-mock>=3.12",
            "mypy-boto3-account>=1.34.0",
            "mypy-boto3-iam>=1.34.0",
        ],
    },

    test_suite="aws_resources.test",

    classifiers=[
        'Development Status :: 2 - Pre-Alpha',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.12',
    ],
    entry_points={
        'console_scripts': [
            'aws-resources = aws_resources.cli:root',
        ],
    },
)
