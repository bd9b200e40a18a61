import os, sys
import warnings
from pathlib import Path

# Add src/ to sys.path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

# Ensure required environment variables for the configuration package
os.environ.setdefault("DISCORD_API_TOKEN", "test-token")
os.environ.setdefault("DISCORD_GUILD_ID", "123456789012345678")
os.environ.setdefault("DISCORD_CHANNEL_ID", "234567890123456789")
# Keep a developer's config.toml out of the test run
os.environ["VATSIM_LISTING_CONFIG"] = str(Path(__file__).resolve().parent / "missing-config.toml")

# Silence deprecation warnings surfaced from third-party dependencies during tests
warnings.filterwarnings(
    "ignore", category=DeprecationWarning, module=r"^discord\\.player$"
)
warnings.filterwarnings("ignore", "'audioop' is deprecated", DeprecationWarning)


def pytest_configure(config):
    warnings.filterwarnings(
        "ignore", category=DeprecationWarning, module=r"^discord\\.player$"
    )
    warnings.filterwarnings("ignore", "'audioop' is deprecated", DeprecationWarning)
