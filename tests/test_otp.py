import asyncio
from datetime import datetime

import pytest
from sqlalchemy import func, select

from app.core.errors import InvalidOrExpiredOtp
from app.db.models.otp_code import OtpCode
from app.services import otp as otp_module
from app.services.otp import OtpManager, generate_numeric_code
from tests.utils import MOBILE, RecordingSender


async def count_codes(db, mobile=MOBILE):
    result = await db.execute(select(func.count()).select_from(OtpCode).where(OtpCode.mobile == mobile))
    return result.scalar_one()


def test_generate_numeric_code():
    for length in (4, 6, 8):
        code = generate_numeric_code(length)
        assert len(code) == length
        assert code.isdigit()


async def test_issue_creates_and_sends_code(db_session, settings, sender):
    manager = OtpManager(db_session, settings, sender)

    await manager.issue_if_absent(MOBILE)

    otp_code = (await db_session.execute(select(OtpCode))).scalars().one()
    assert otp_code.mobile == MOBILE
    assert len(otp_code.code) == settings.OTP_CODE_LENGTH
    assert otp_code.expires_at > datetime.utcnow()
    assert not otp_code.is_used
    assert sender.sent == [(MOBILE, otp_code.code)]


async def test_issue_is_noop_while_code_is_live(db_session, settings, sender):
    manager = OtpManager(db_session, settings, sender)

    await manager.issue_if_absent(MOBILE)
    await manager.issue_if_absent(MOBILE)

    assert await count_codes(db_session) == 1
    assert len(sender.sent) == 1


async def test_issue_after_expiry_creates_new_code(db_session, settings, sender, make_otp):
    await make_otp(expires_in_minutes=-1)

    await OtpManager(db_session, settings, sender).issue_if_absent(MOBILE)

    assert await count_codes(db_session) == 2
    assert len(sender.sent) == 1


async def test_issue_after_used_code_creates_new_code(db_session, settings, sender, make_otp):
    await make_otp(is_used=True)

    await OtpManager(db_session, settings, sender).issue_if_absent(MOBILE)

    assert await count_codes(db_session) == 2


async def test_live_code_of_other_mobile_does_not_block(db_session, settings, sender, make_otp):
    await make_otp(mobile="09121111111")

    await OtpManager(db_session, settings, sender).issue_if_absent(MOBILE)

    assert await count_codes(db_session) == 1


async def test_delivery_failure_keeps_record(db_session, settings):
    failing = RecordingSender(settings, ok=False)

    await OtpManager(db_session, settings, failing).issue_if_absent(MOBILE)

    assert await count_codes(db_session) == 1
    assert len(failing.sent) == 1


async def test_consume_is_single_use(db_session, settings, sender, make_otp):
    await make_otp(code="123456")
    manager = OtpManager(db_session, settings, sender)

    await manager.consume(MOBILE, "123456")
    with pytest.raises(InvalidOrExpiredOtp):
        await manager.consume(MOBILE, "123456")


async def test_consume_rejects_expired_code(db_session, settings, sender, make_otp):
    await make_otp(code="123456", expires_in_minutes=-1)

    with pytest.raises(InvalidOrExpiredOtp):
        await OtpManager(db_session, settings, sender).consume(MOBILE, "123456")


async def test_consume_is_scoped_by_mobile(db_session, settings, sender, make_otp):
    await make_otp(mobile="09121111111", code="123456")

    with pytest.raises(InvalidOrExpiredOtp):
        await OtpManager(db_session, settings, sender).consume(MOBILE, "123456")


async def test_consume_rejects_wrong_code(db_session, settings, sender, make_otp):
    await make_otp(code="123456")

    with pytest.raises(InvalidOrExpiredOtp):
        await OtpManager(db_session, settings, sender).consume(MOBILE, "654321")


async def test_consume_loses_race(db_session, settings, sender, make_otp, monkeypatch):
    await make_otp(code="123456")

    async def already_consumed(db, otp_code):
        return False

    monkeypatch.setattr(otp_module, "mark_code_as_used", already_consumed)

    with pytest.raises(InvalidOrExpiredOtp):
        await OtpManager(db_session, settings, sender).consume(MOBILE, "123456")


async def test_conditional_update_succeeds_only_once(db_session, make_otp):
    from app.db.repositories.otp_code import mark_code_as_used

    otp_code = await make_otp()

    assert await mark_code_as_used(db_session, otp_code) is True
    assert await mark_code_as_used(db_session, otp_code) is False


async def test_sender_without_gateway_only_logs(settings):
    from app.services.sms import SmsSender

    assert await SmsSender(settings).send_otp(MOBILE, "123456") is True


async def test_concurrent_issue_creates_single_code(session_factory, settings, sender):
    async def issue():
        async with session_factory() as session:
            return await OtpManager(session, settings, sender).issue_if_absent(MOBILE)

    results = await asyncio.gather(issue(), issue())

    assert sorted(results) == [False, True]
    async with session_factory() as session:
        assert await count_codes(session) == 1
    assert len(sender.sent) == 1


async def test_issue_reports_whether_code_was_created(db_session, settings, sender):
    manager = OtpManager(db_session, settings, sender)

    assert await manager.issue_if_absent(MOBILE) is True
    assert await manager.issue_if_absent(MOBILE) is False
