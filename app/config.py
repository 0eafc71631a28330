import os

ENV = os.getenv("ENV", "production")

DATABASE_URL = os.getenv("DATABASE_URL", "postgresql://storeguard:storeguard@db:5432/storeguard")

# Auth
JWT_SECRET = os.getenv("JWT_SECRET", "change-me-in-production")
REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", "change-me-too")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "15"))
REFRESH_TOKEN_EXPIRES_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRES_DAYS", "7"))
STREAM_TOKEN_EXPIRES_MINUTES = int(os.getenv("STREAM_TOKEN_EXPIRES_MINUTES", "60"))

# Shared secret for siren controllers polling /api/siren/device-status
IOT_DEVICE_SECRET = os.getenv("IOT_DEVICE_SECRET")

# Streaming media server
GO2RTC_URL = os.getenv("GO2RTC_URL", "http://localhost:1984")
GO2RTC_RTSP_URL = os.getenv("GO2RTC_RTSP_URL", "rtsp://localhost:8554")
STREAM_READY_TIMEOUT = float(os.getenv("STREAM_READY_TIMEOUT", "8"))

# WhatsApp gateway (Twilio)
TWILIO_API_URL = os.getenv("TWILIO_API_URL", "https://api.twilio.com/2010-04-01")
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
TWILIO_WHATSAPP_NUMBER = os.getenv("TWILIO_WHATSAPP_NUMBER")

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# Seeded on startup outside production
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
ADMIN_PHONE = os.getenv("ADMIN_PHONE", "+10000000000")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
