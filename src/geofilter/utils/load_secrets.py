from typing import Optional

from dotenv import load_dotenv


def load_env_vars(dotenv_path: Optional[str] = None):
    # variables already set in the environment win over the .env file
    load_dotenv(dotenv_path=dotenv_path, override=False)
