"""Functional tests for the account-active poller."""

import pytest

from bakery_hub.session.poller import AccountActivePoller

from conftest import FakeSessionStore


@pytest.fixture
def poller(store, navigator, clock):
    return AccountActivePoller(store, navigator, clock, interval=60)


class TestCheckActive:
    @pytest.mark.asyncio
    async def test_deactivated_account_is_signed_out(self, poller, store, navigator):
        store.active = False

        assert await poller.check_active() is True
        assert store.count("sign_out") == 1
        assert navigator.calls == [("/login", {"deactivated": "1"})]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("flag", [True, None])
    async def test_active_or_unknown_flag_is_left_alone(self, poller, store, navigator, flag):
        store.active = flag

        assert await poller.check_active() is False
        assert store.count("sign_out") == 0
        assert navigator.calls == []

    @pytest.mark.asyncio
    async def test_no_session_skips_profile_read(self, navigator, clock):
        store = FakeSessionStore(user_id=None)
        poller = AccountActivePoller(store, navigator, clock, interval=60)

        assert await poller.check_active() is False
        assert store.count("get_profile_active_flag") == 0

    @pytest.mark.asyncio
    async def test_session_lookup_failure_skips_cycle(self, poller, store, navigator):
        store.fail_session = True
        store.active = False

        assert await poller.check_active() is False
        assert navigator.calls == []

    @pytest.mark.asyncio
    async def test_sign_out_failure_skips_redirect(self, poller, store, navigator):
        store.active = False
        store.fail_sign_out = True

        assert await poller.check_active() is False
        assert navigator.calls == []


class TestPolling:
    @pytest.mark.asyncio
    async def test_checks_immediately_then_every_interval(self, poller, store, clock):
        poller.start()
        await clock.run_pending()
        assert store.count("get_profile_active_flag") == 1

        await clock.advance(59)
        assert store.count("get_profile_active_flag") == 1

        await clock.advance(1)
        assert store.count("get_profile_active_flag") == 2

        await clock.advance(120)
        assert store.count("get_profile_active_flag") == 4

    @pytest.mark.asyncio
    async def test_deactivation_is_noticed_within_one_interval(self, poller, store, navigator, clock):
        poller.start()
        await clock.advance(90)
        assert navigator.calls == []

        store.active = False
        await clock.advance(30)
        assert navigator.calls == [("/login", {"deactivated": "1"})]

    @pytest.mark.asyncio
    async def test_stop_before_first_tick_makes_no_calls(self, poller, store, clock):
        poller.start()
        poller.stop()

        await clock.advance(600)
        assert store.calls == []
        assert clock.pending == 0

    @pytest.mark.asyncio
    async def test_set_interval_same_value_keeps_timers(self, poller, clock):
        poller.start()
        periodic = poller._periodic

        poller.set_interval(60)
        assert poller._periodic is periodic

    @pytest.mark.asyncio
    async def test_set_interval_restarts_timers(self, poller, store, clock):
        poller.start()
        await clock.run_pending()
        assert store.count("get_profile_active_flag") == 1

        poller.set_interval(10)
        await clock.run_pending()
        assert store.count("get_profile_active_flag") == 2

        await clock.advance(30)
        assert store.count("get_profile_active_flag") == 5
        assert clock.pending == 1

    def test_set_interval_while_stopped_only_updates_value(self, poller, clock):
        poller.set_interval(15)
        assert poller.interval == 15
        assert not poller.running
        assert clock.pending == 0
