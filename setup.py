from setuptools import setup, find_packages
from pathlib import Path

readme_path = Path(__file__).parent / "README.md"
if readme_path.exists():
    long_description = readme_path.read_text(encoding="utf-8")
else:
    long_description = "Declarative entity schemas that shape internal objects into output data for serialization layers."

setup(
    name="entity-schema",
    version="0.3.0",
    description="Declarative entity schemas that shape internal objects into output data",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    install_requires=[
        "pydantic>=2.0.0",  # FieldSpec and EntityConfig models
        "pyyaml>=6.0",  # config files
        "lark>=1.1.0",  # field selector grammar
    ],
    extras_require={
        "dev": [
            "pytest",
            "coverage",
            "hypothesis",
            "parameterized==0.9.0",
        ],
    },
)
