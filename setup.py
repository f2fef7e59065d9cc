import setuptools

setuptools.setup(
    name="opensearch-testcontainers",
    version="2.0.0",
    description="Disposable single- and multi-node OpenSearch clusters in Docker for integration tests",
    author="opensearch-testcontainers",
    packages=setuptools.find_packages(include=["opensearch_testcontainers", "opensearch_testcontainers.*"]),
    install_requires=[
        "coloredlogs",
        "docker",
        "pydantic>=2",
        "pyyaml",
        "testcontainers>=4.15,<5",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.2",
            "requests",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Testing",
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: Apache Software License",
    ],
    python_requires=">=3.10",
)
