"""Install the Fresh Bonds marketplace services."""

from setuptools import setup, find_packages

setup(
    name='freshbonds',
    version='0.1.0',
    packages=find_packages(include=['freshbonds', 'freshbonds.*',
                                    'user_service', 'user_service.*',
                                    'product_service', 'product_service.*',
                                    'gateway', 'gateway.*'],
                           exclude=['*tests*']),
    py_modules=['create_user', 'generate_token'],
    entry_points={
        'console_scripts': [
            'freshbonds-create-user=create_user:create_user',
            'freshbonds-generate-token=generate_token:generate_token'
        ]
    },
    install_requires=[
        "flask",
        "flask-cors",
        "werkzeug",
        "pyjwt",
        "sqlalchemy",
        "flask-sqlalchemy",
        "python-dateutil",
        "pytz",
        "redis",
        "fakeredis",
        "wtforms",
        "email-validator",
        "bcrypt",
        "requests",
        "click",
        "python-json-logger>=3.1"
    ],
    extras_require={
        'test': [
            "pytest",
            "mimesis"
        ]
    },
    zip_safe=False
)
