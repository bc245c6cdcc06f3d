import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./barbershop.db")

# Business timezone used to interpret naive timestamps and to format messages
BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "America/Sao_Paulo")

# Working hours (HH:MM, business timezone)
OPEN_TIME = os.getenv("OPEN_TIME", "08:00")
CLOSE_TIME = os.getenv("CLOSE_TIME", "18:00")
# 0=Sunday ... 6=Saturday
WORKING_DAYS = [
    int(day) for day in os.getenv("WORKING_DAYS", "1,2,3,4,5,6").split(",") if day.strip()
]
SLOT_INTERVAL_MIN = int(os.getenv("SLOT_INTERVAL_MIN", "15"))
MIN_ADVANCE_HOURS = int(os.getenv("MIN_ADVANCE_HOURS", "2"))
MAX_ADVANCE_DAYS = int(os.getenv("MAX_ADVANCE_DAYS", "30"))

# Reject bookings outside working hours / advance window on create and update.
# Off by default so back-office staff can register walk-ins and past visits.
ENFORCE_BOOKING_RULES = os.getenv("ENFORCE_BOOKING_RULES", "false").lower() == "true"

# Frontend origins allowed by CORS
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000,http://localhost:8100",
).split(",")

# Share of the service price credited to the barber for each appointment
COMMISSION_RATE = os.getenv("COMMISSION_RATE", "0.5")
