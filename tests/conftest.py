import os

# Must run before anything imports app.config / app.database
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
os.environ["BUSINESS_TIMEZONE"] = "America/Sao_Paulo"
os.environ["ENFORCE_BOOKING_RULES"] = "false"
