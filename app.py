"""
DailyLessons - Daily lesson delivery bot for Telegram

Sends one lesson per day (image, text, audio and a recommended video) to
every subscriber, and answers /start, /progress, /lesson <n> and /help.

Usage:
    python app.py

Configuration is read from the environment or a .env file; see .env.example.
"""

import sys

from dailylessons.bot import main


if __name__ == "__main__":
    sys.exit(main())
