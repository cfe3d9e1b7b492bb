from setuptools import setup, find_packages

# Read requirements.txt
with open('requirements.txt') as f:
    requirements = f.read().splitlines()

# Read README.md for long description
with open('README.md', 'r', encoding='utf-8') as f:
    long_description = f.read()

setup(
    name='ld-stale-flag-report',
    version='1.0.0',
    description='LaunchDarkly Stale Feature Flag Report',
    long_description=long_description,
    long_description_content_type='text/markdown',
    author='LaunchDarkly-Labs',
    author_email='',
    url='https://github.com/launchdarkly-labs/launchdarkly-solutions-kit',
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.1.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'ld-stale-flag-report=src.ld_stale_flag_report:main',
        ],
    },
    python_requires='>=3.8',
    package_data={
        '': ['README.md', 'requirements.txt'],
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Topic :: Software Development :: Build Tools',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ],
    keywords='launchdarkly feature-flags stale cleanup report',
)
