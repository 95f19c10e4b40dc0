import os
from dataclasses import dataclass, field

from dotenv import load_dotenv


def load_environment() -> str:
    """Load the .env file for DBINTERFACE_ENV and return the environment name."""
    env = os.environ.get("DBINTERFACE_ENV", "development").lower()
    env_file = f".env.{env}"
    if os.path.exists(env_file):
        load_dotenv(env_file)
    else:
        # Fall back to the default .env file
        load_dotenv()
    return env


CONNECTION_TEMPLATE = (
    "host=%SERVER% port=%PORT% dbname=%DB% user=%USERNAME% password=%PASSWORD%"
)


@dataclass(frozen=True)
class ConnectionDescriptor:
    """
    Where and as whom to connect. Built once at startup and handed to
    every data-access object; never mutated afterwards.
    """

    server: str
    port: str
    database: str
    username: str
    password: str = field(repr=False)

    @property
    def conninfo(self) -> str:
        return (
            CONNECTION_TEMPLATE.replace("%SERVER%", self.server)
            .replace("%PORT%", str(self.port))
            .replace("%DB%", self.database)
            .replace("%USERNAME%", self.username)
            .replace("%PASSWORD%", self.password)
        )

    @classmethod
    def from_env(cls) -> "ConnectionDescriptor":
        load_environment()
        return cls(
            server=os.environ.get("DB_SERVER", "localhost"),
            port=os.environ.get("DB_PORT", "5432"),
            database=os.environ["DB_NAME"],
            username=os.environ["DB_USERNAME"],
            password=os.environ.get("DB_PASSWORD", ""),
        )
