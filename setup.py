from setuptools import setup, find_packages

def get_version():
    with open("VERSION", "r") as f:
        return f.read().strip()

setup(
    name="installer-menu",
    version=get_version(),
    description="Arrow-key terminal selection menu for server installer scripts",
    author="k6w",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "rich>=13.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "installer-menu=installer_menu.main:main",
        ],
    },
    python_requires=">=3.8",
)
