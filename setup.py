"""Install the community submission moderation core package."""

from setuptools import setup, find_packages

setup(
    name='community-moderation-core',
    version='0.1.0',
    packages=find_packages(where='./core'),
    package_dir={'': 'core'},
    zip_safe=False,
    python_requires='>=3.8',
    install_requires=[
        'flask',
        'sqlalchemy>=1.4',
        'flask-sqlalchemy>=3.0',
        'python-dateutil',
        'pytz',
        'retry',
        'pyjwt>=2.0',
    ],
    extras_require={
        'test': ['pytest'],
    },
    include_package_data=True
)
