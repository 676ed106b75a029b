"""Pomodoro alarm daemon backend (FastAPI)"""
