"""
Setup configuration for the Cinder flexvolume driver
"""

from setuptools import setup, find_packages
import os

# Read README
def read_file(filename):
    with open(os.path.join(os.path.dirname(__file__), filename), encoding='utf-8') as f:
        return f.read()

setup(
    name='flexcinder',
    version='1.0.0',
    description='Kubernetes FlexVolume driver attaching Cinder volumes to hypervisor-based runtimes',
    long_description=read_file('README.md'),
    long_description_content_type='text/markdown',
    license='Apache License 2.0',

    packages=find_packages(exclude=['tests', 'tests.*']),

    install_requires=[
        'click>=8.1.3',
        'keystoneauth1>=5.0.0',
        'python-json-logger>=3.1.0',
    ],

    extras_require={
        'dev': [
            'pytest>=7.4.0',
            'pytest-cov>=4.1.0',
            'pytest-mock>=3.11.1',
            'mock>=5.1.0',
            'flake8>=6.1.0',
        ],
    },

    entry_points={
        'console_scripts': [
            'flexcinder=flexcinder.cli.main:main',
        ],
    },

    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: System Administrators',
        'License :: OSI Approved :: Apache Software License',
        'Operating System :: POSIX :: Linux',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Topic :: System :: Filesystems',
    ],

    python_requires='>=3.8',

    include_package_data=True,
    zip_safe=False,

    keywords='kubernetes flexvolume cinder openstack storage',
)
