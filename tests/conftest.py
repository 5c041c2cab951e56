"""Shared fixtures and path configuration."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from nowpost.config import AppConfig, PublishingConfig, RepositoryConfig, SessionConfig  # noqa: E402
from nowpost.github import GitHubContentsClient  # noqa: E402

from tests.utils import FakeRepository  # noqa: E402

NOW_PAGE = """<html>
<body>
<h1>Now</h1>
<p><a href="../workbench/">Workbench</a></p>
<div class="date">Update: January 01, 2024</div>
<img src="../docs/20240101T090000.jpg" style="max-width:100%;border-radius:8px;margin:4px 0 8px 0">
<ul>
  <li>New year, new page</li>
</ul>

</body>
</html>
"""


@pytest.fixture()
def app_config() -> AppConfig:
    return AppConfig(
        repository=RepositoryConfig(owner="OutFoxD", name="Project-Portfolio"),
        publishing=PublishingConfig(),
        session=SessionConfig(store="memory", credential_path=None),
    )


@pytest.fixture()
def fake_repo() -> FakeRepository:
    repo = FakeRepository()
    repo.add_file("now/index.html", NOW_PAGE)
    return repo


@pytest.fixture()
def client(app_config: AppConfig, fake_repo: FakeRepository) -> GitHubContentsClient:
    return GitHubContentsClient(app_config.repository, session=fake_repo)  # type: ignore[arg-type]
