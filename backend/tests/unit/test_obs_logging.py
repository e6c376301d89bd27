import json
import logging

import pytest

from shakenet.infra import rate_limit
from shakenet.obs import logging as obs_logging
from shakenet.settings import settings


def _record(**extra):
	record = logging.LogRecord("shakenet.test", logging.INFO, __file__, 1, "meet sent", (), None)
	for key, value in extra.items():
		setattr(record, key, value)
	return record


def test_json_formatter_includes_context_and_redacts():
	tokens = obs_logging.bind_context(request_id="req-1", route="/network/meet")
	try:
		line = obs_logging.JSONLogFormatter().format(
			_record(to_user_id="U4", message_text="see you", access_token="abc", distance=2)
		)
	finally:
		obs_logging.reset_context(tokens)

	payload = json.loads(line)
	assert payload["msg"] == "meet sent"
	assert payload["request_id"] == "req-1"
	assert payload["route"] == "/network/meet"
	assert payload["service"] == settings.service_name
	assert payload["to_user_id"] == "U4"
	assert payload["distance"] == 2
	assert payload["message_text"] == "[redacted]"
	assert payload["access_token"] == "[redacted]"
	assert obs_logging.current_request_id() is None


def test_json_formatter_truncates_large_values():
	line = obs_logging.JSONLogFormatter().format(_record(ids=[str(idx) for idx in range(50)], note="x" * 1000))

	payload = json.loads(line)
	assert len(payload["ids"]) == 11
	assert len(payload["note"]) == 257


def test_info_sampling_keeps_warnings(monkeypatch):
	monkeypatch.setattr(settings, "obs_log_sampling_rate_info", 0.0)
	sampler = obs_logging.InfoSamplingFilter()
	warning = logging.LogRecord("shakenet.test", logging.WARNING, __file__, 1, "w", (), None)

	assert sampler.filter(_record()) is False
	assert sampler.filter(warning) is True


@pytest.mark.asyncio
async def test_rate_limit_fixed_window():
	results = [await rate_limit.allow("meet", "U1", limit=2, window_seconds=60, now=120.0) for _ in range(3)]

	assert results == [True, True, False]
	assert await rate_limit.allow("meet", "U1", limit=2, window_seconds=60, now=180.0) is True
	assert await rate_limit.allow("meet", "U2", limit=0) is False
