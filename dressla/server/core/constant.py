"""Server-wide constants."""

PROJECT_NAME = "Dressla Marketplace"
API_V1_STR = "/api/v1"
