from setuptools import setup, find_namespace_packages

setup(
    name="imgdeps",
    version="0.1.0",
    packages=find_namespace_packages(where="src", include=["imgdeps", "imgdeps.*"]),
    package_dir={"": "src"},
    python_requires=">=3.8",
    install_requires=[
        "pydantic>=2.0",
        "click>=8.0",
        "python-dotenv>=1.0",
        "jinja2>=3.0",
        "httpx>=0.24",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "imgdeps=imgdeps.CLI.main:main",
        ],
    },
)
