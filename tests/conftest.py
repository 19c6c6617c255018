"""
Shared pytest fixtures for the ClawSentry test suite.

Provides a temporary data directory, a SentryConfig pointing at it, and
live SkillFence / LogStore instances that are closed after each test so
writer threads never outlive their directory.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Import after path fix
from clawsentry.core.audit.log_store import LogStore
from clawsentry.core.config import SentryConfig
from clawsentry.fence.hooks import FenceHooks
from clawsentry.fence.orchestrator import SkillFence
from clawsentry.fence.query import SentryQueryService


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_base(tmp_path):
    """A temporary ClawSentry base directory with logs and a skill root."""
    (tmp_path / "logs").mkdir()
    (tmp_path / "skills").mkdir()
    return tmp_path


@pytest.fixture
def config(tmp_base):
    """A SentryConfig confined to the temp directory."""
    cfg = SentryConfig(base_dir=tmp_base)
    cfg.skill_roots = [tmp_base / "skills"]
    return cfg


# ---------------------------------------------------------------------------
# Component fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def store(tmp_base):
    s = LogStore(tmp_base / "logs")
    yield s
    s.close()


@pytest.fixture
def fence(config):
    f = SkillFence(config)
    yield f
    f.close()


@pytest.fixture
def hooks(fence):
    return FenceHooks(fence)


@pytest.fixture
def query(fence):
    return SentryQueryService(fence)


def make_skill(root: Path, name: str, files: dict) -> Path:
    """Create a skill directory with the given relative-path -> text files."""
    skill = root / name
    for rel, text in files.items():
        path = skill / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding='utf-8')
    return skill
