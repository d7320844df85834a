from common.db.context import readonly, is_readonly_forced, get_current_session
from common.db.scoped import get_session, transaction


class TestSessionContext:
    async def test_readonly_flag_scoped_to_call(self):
        seen = []

        @readonly
        async def read():
            seen.append(is_readonly_forced())

        await read()

        assert seen == [True]
        assert is_readonly_forced() is False

    async def test_operations_share_transaction_session(self):
        async with transaction() as outer:
            assert get_current_session() is outer
            async with get_session() as inner:
                assert inner is outer

        assert get_current_session() is None
