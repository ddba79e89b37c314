"""Shared test fixtures for the gitgate test suite.

Available Fixtures
==================

Application state (from tests/fixtures/state.py)
------------------------------------------------

repo_dir: Empty directory standing in for a repository working tree.
log_dir: Directory the journals persist to.
mock_git: MagicMock with AsyncMock methods matching GitRepository.
single_state: Single-instance AppState whose git facade is ``mock_git``.
multi_state: Multi-instance AppState with repositories ``web-app`` and ``api``.
dispatcher: RpcDispatcher over ``single_state``.
"""
