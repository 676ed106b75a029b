from setuptools import find_packages, setup

# Minimal setup.py to allow pip installation in environments (like p4a) that
# default to legacy builds and need explicit python_requires.

package_list = find_packages(
  include=[
    "entrypoints",
    "entrypoints.*",
    "backend",
    "backend.*",
    "os_interfaces",
    "os_interfaces.*",
    "alarm",
    "alarm.*",
    "alarm_schedule",
    "alarm_schedule.*",
  ]
)

setup(
  name="pomodoro-alarm",
  version="0.1.0",
  description="Single-shot alarm daemon with sound, vibration and notifications",
  python_requires=">=3.11",
  packages=package_list,
  include_package_data=True,
  install_requires=[
    "fastapi>=0.110,<0.137",
    "uvicorn[standard]",
    "pyyaml",
    "pydantic>=2",
    "python-dotenv",
    "platformdirs",
    "httpx",
    "asgi-correlation-id",
    "slowapi",
  ],
  extras_require={
    "android": ["pyjnius", "cython==3.0.12", "buildozer"],
    "linux": ["desktop-notifier>=5", "pystemd", "pygame"],
    "dev": ["pytest", "pytest-asyncio", "pytest-cov", "httpx"],
  },
  entry_points={
    "console_scripts": [
      "pomodoro-alarm=entrypoints.pomodoro_alarm_linux:main",
      "pomodoro-alarm-fire=alarm.main:main",
    ],
  },
)
