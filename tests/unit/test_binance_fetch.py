"""
测试 Binance 统计端点适配器
"""

import asyncio

import aiohttp
import pytest

from ratiowatch.connection.binance import (
    BinanceFuturesData,
    InterestRecord,
    LongShortRecord,
    fetch_series,
    latest,
)
from ratiowatch.core.config import BinanceConfig
from ratiowatch.core.exceptions import DecodeError, FetchError, NetworkError, ParseError

OI_URL = "https://fapi.binance.com/futures/data/openInterestHist"

OI_ROWS = [
    {
        "symbol": "BTCUSDT",
        "sumOpenInterest": "88600.00000000",
        "sumOpenInterestValue": "8680000000.00000000",
        "timestamp": 1732442400000,
    },
    {
        "symbol": "BTCUSDT",
        "sumOpenInterest": "88637.56900000",
        "sumOpenInterestValue": "8688981341.44580000",
        "timestamp": 1732442700000,
    },
]


class TestRecords:
    """测试记录解析"""

    def test_interest_record_from_dict(self):
        record = InterestRecord.from_dict(OI_ROWS[1])

        assert record.symbol == "BTCUSDT"
        assert record.sum_open_interest == "88637.56900000"
        assert record.sum_open_interest_value == "8688981341.44580000"
        assert record.timestamp == 1732442700000

    def test_long_short_record_from_dict(self):
        record = LongShortRecord.from_dict({
            "symbol": "BTCUSDT",
            "longShortRatio": "1.1372",
            "longAccount": "0.5321",
            "shortAccount": "0.4679",
            "timestamp": 1732442700000,
        })

        assert record.long_account == "0.5321"
        assert record.short_account == "0.4679"

    def test_missing_field(self):
        with pytest.raises(ParseError) as exc:
            LongShortRecord.from_dict({"symbol": "BTCUSDT", "timestamp": 1})
        assert exc.value.field == "longShortRatio"

    def test_wrong_types(self):
        row = dict(OI_ROWS[0], sumOpenInterest=88600.0)
        with pytest.raises(ParseError):
            InterestRecord.from_dict(row)

        row = dict(OI_ROWS[0], timestamp="1732442400000")
        with pytest.raises(ParseError):
            InterestRecord.from_dict(row)

        with pytest.raises(ParseError):
            InterestRecord.from_dict(["BTCUSDT"])


class TestFetchSeries:
    """测试单次 GET 与错误分类"""

    @pytest.mark.asyncio
    async def test_success(self, fake_session, fake_response):
        session = fake_session({"openInterestHist": fake_response(200, OI_ROWS)})

        records = await fetch_series(session, OI_URL, InterestRecord, {"symbol": "BTCUSDT"})

        assert len(records) == 2
        assert records[1].timestamp == 1732442700000
        assert session.calls == [("GET", OI_URL, {"params": {"symbol": "BTCUSDT"}})]

    @pytest.mark.asyncio
    async def test_empty_array_is_not_an_error(self, fake_session, fake_response):
        session = fake_session({"openInterestHist": fake_response(200, [])})

        assert await fetch_series(session, OI_URL, InterestRecord) == []

    @pytest.mark.asyncio
    async def test_transport_failure(self, fake_session):
        session = fake_session({"openInterestHist": aiohttp.ClientConnectionError("refused")})

        with pytest.raises(NetworkError) as exc:
            await fetch_series(session, OI_URL, InterestRecord)
        assert exc.value.url == OI_URL

    @pytest.mark.asyncio
    async def test_timeout(self, fake_session):
        session = fake_session({"openInterestHist": asyncio.TimeoutError()})

        with pytest.raises(NetworkError):
            await fetch_series(session, OI_URL, InterestRecord, timeout=1.0)
        assert "timeout" in session.calls[0][2]

    @pytest.mark.asyncio
    async def test_http_error_status(self, fake_session, fake_response):
        session = fake_session({"openInterestHist": fake_response(429, "Too many requests")})

        with pytest.raises(NetworkError) as exc:
            await fetch_series(session, OI_URL, InterestRecord)
        assert exc.value.status == 429

    @pytest.mark.asyncio
    async def test_non_utf8_body(self, fake_session, fake_response):
        session = fake_session({"openInterestHist": fake_response(200, b"\xff\xfe\xfa")})

        with pytest.raises(DecodeError):
            await fetch_series(session, OI_URL, InterestRecord)

    @pytest.mark.asyncio
    async def test_malformed_json(self, fake_session, fake_response):
        session = fake_session({"openInterestHist": fake_response(200, '[{"symbol": ')})

        with pytest.raises(DecodeError):
            await fetch_series(session, OI_URL, InterestRecord)

    @pytest.mark.asyncio
    async def test_schema_mismatch(self, fake_session, fake_response):
        session = fake_session({
            "openInterestHist": fake_response(200, {"code": -1121, "msg": "Invalid symbol."}),
        })

        with pytest.raises(ParseError) as exc:
            await fetch_series(session, OI_URL, InterestRecord)
        assert exc.value.url == OI_URL
        assert isinstance(exc.value, FetchError)

    @pytest.mark.asyncio
    async def test_wrong_record_shape(self, fake_session, fake_response):
        session = fake_session({"openInterestHist": fake_response(200, OI_ROWS)})

        with pytest.raises(ParseError) as exc:
            await fetch_series(session, OI_URL, LongShortRecord)
        assert exc.value.url == OI_URL


class TestLatest:
    """测试最新记录选择"""

    def test_max_timestamp(self):
        records = [InterestRecord.from_dict(row) for row in reversed(OI_ROWS)]

        assert latest(records).timestamp == 1732442700000

    def test_empty(self):
        assert latest([]) is None

    def test_tie_keeps_first(self):
        a = InterestRecord("BTCUSDT", "1", "1", 100)
        b = InterestRecord("BTCUSDT", "2", "2", 100)

        assert latest([a, b]) is a


class TestBinanceFuturesData:
    """测试端点目录"""

    @pytest.mark.asyncio
    async def test_urls_and_params(self, fake_session, fake_response):
        session = fake_session({"openInterestHist": fake_response(200, OI_ROWS)})
        source = BinanceFuturesData(BinanceConfig(base_url="https://fapi.binance.com/", limit=2), session)

        records = await source.open_interest()

        assert len(records) == 2
        method, url, kwargs = session.calls[0]
        assert url == OI_URL
        assert kwargs["params"] == {"symbol": "BTCUSDT", "period": "5m", "limit": 2}
        assert "timeout" not in kwargs

    def test_ratio_paths(self):
        source = BinanceFuturesData(BinanceConfig(), session=None)

        assert source.url(source.config.global_ratio_path).endswith("/futures/data/globalLongShortAccountRatio")
        assert source.url(source.config.top_position_path).endswith("/futures/data/topLongShortPositionRatio")
        assert source.url(source.config.top_account_path).endswith("/futures/data/topLongShortAccountRatio")
