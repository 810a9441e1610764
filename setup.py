from setuptools import setup, find_packages

def parse_requirements(requirements):
    with open(requirements) as f:
        return [l.strip('\n') for l in f if l.strip('\n') and not l.startswith('#')]

requirements = parse_requirements("requirements.txt")

setup(
    name='lexpilot_backend',
    version='0.1.0',
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.4", "pytest-asyncio>=0.23", "cryptography"],
    },
    package_dir={'': 'src'},
    packages=find_packages(where='src', exclude=['lexpilot_backend.tests']),
    entry_points={
        "console_scripts": [
            "lexpilot=lexpilot_backend.cli.cli:cli",
        ],
    }
)
