"""
Pytest configuration and fixtures for Sprout tests.
"""

import sys
from pathlib import Path

# Add project root to path so imports work
root_path = Path(__file__).parent.parent
sys.path.insert(0, str(root_path))

import pytest
import pytest_asyncio

from branches.suggestions.moderation import ModerationWorkflow
from branches.suggestions.registry import SuggestionRegistry
from branches.suggestions.sticky import StickyReminderManager
from branches.suggestions.store import SuggestionStore
from fakes import CHANNEL_ID, GUILD_ID, FakeClock, FakePlatform


@pytest_asyncio.fixture
async def store(tmp_path):
    store = SuggestionStore(str(tmp_path / "data.db"))
    await store.initialize()
    return store


@pytest.fixture
def platform():
    return FakePlatform()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(store, platform):
    return SuggestionRegistry(store, platform, min_length=3, max_length=200)


@pytest.fixture
def moderation(registry, platform):
    return ModerationWorkflow(registry, platform)


@pytest.fixture
def sticky(registry, platform, clock):
    return StickyReminderManager(registry, platform, text="Use /suggest to make a suggestion.", clock=clock)


@pytest_asyncio.fixture
async def configured(registry):
    """Guild with CHANNEL_ID as its suggestion channel (no reminder yet)."""
    async with registry.transaction(GUILD_ID) as record:
        record.channel_id = CHANNEL_ID
    return registry
