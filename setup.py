#!/usr/bin/env -S python3 -B -u
"""
Setup script for ovssave package - Open vSwitch state snapshot helper
"""

from setuptools import setup, find_packages
import os

# Read the README file for long description
def read_readme():
    """Read README.md for package long description."""
    readme_path = os.path.join(os.path.dirname(__file__), 'README.md')
    if os.path.exists(readme_path):
        with open(readme_path, 'r', encoding='utf-8') as f:
            return f.read()
    return "ovs-save - saves interface, flow and datapath state as restore scripts"

# Read requirements from requirements.txt
def read_requirements():
    """Read requirements from requirements.txt file."""
    requirements_path = os.path.join(os.path.dirname(__file__), 'requirements.txt')
    if os.path.exists(requirements_path):
        with open(requirements_path, 'r', encoding='utf-8') as f:
            return [line.strip() for line in f if line.strip() and not line.startswith('#')]
    return []

# Define package metadata
setup(
    name='ovs-save',
    version='1.0.0',
    description='Open vSwitch helper that saves interface, flow and datapath state as shell commands',
    long_description=read_readme(),
    long_description_content_type='text/markdown',
    author='ovs-save developers',
    author_email='',
    license='MIT',

    # Package structure - use ovssave namespace
    packages=['ovssave'] + ['ovssave.' + pkg for pkg in find_packages(where='src')],
    package_dir={
        'ovssave': 'src',
    },

    # Python version requirement
    python_requires='>=3.7',

    # Dependencies from requirements.txt
    install_requires=read_requirements(),

    # Optional dependencies
    extras_require={
        'dev': [
            'pytest>=6.0.0',
            'pytest-cov>=2.0.0',
            'flake8>=3.8.0',
        ],
    },

    # Entry points for command-line scripts
    entry_points={
        'console_scripts': [
            'ovs-save=ovssave.cli.ovs_save:main',
        ],
    },

    # Manual pages
    data_files=[
        ('share/man/man8', ['docs/ovs-save.8']),
    ],

    # Classification
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: System Administrators',
        'License :: OSI Approved :: MIT License',
        'Operating System :: POSIX :: Linux',
        'Programming Language :: Python :: 3',
        'Topic :: System :: Networking',
        'Topic :: System :: Systems Administration',
    ],

    # Keywords
    keywords='openvswitch ovs iproute2 iptables openflow datapath restore',
)
