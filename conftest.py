"""Global pytest configuration."""

import os

# Force stub providers in tests before any settings are read
os.environ["OPENAI_API_KEY"] = ""
