"""Android build entrypoint.

This thin wrapper delegates to the Android daemon bootstrap so that
python-for-android/buildozer can locate a `main.py` when packaging.
"""

from entrypoints.pomodoro_alarm_android import main as run_android_daemon

if __name__ == "__main__":
  run_android_daemon()
