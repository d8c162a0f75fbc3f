"""Tests for classifier acquisition."""

import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

from conftest import FakeClassifier, FakeLoader
from config.settings import VerificationConfig
from verification.lifecycle import ClassifierLifecycle
from verification.models import LifecycleState


def make_lifecycle(loader, device="auto", accelerator="cuda"):
    return ClassifierLifecycle(
        VerificationConfig(device=device),
        loader=loader,
        accelerator_probe=lambda: accelerator,
    )


class TestAcquisition:

    def test_starts_uninitialized(self):
        lc = make_lifecycle(FakeLoader())
        assert lc.state is LifecycleState.UNINITIALIZED
        assert not lc.is_ready
        assert lc.handle is None

    def test_accelerated_path(self):
        loader = FakeLoader()
        lc = make_lifecycle(loader)
        assert asyncio.run(lc.ensure_ready())
        assert lc.state is LifecycleState.READY
        assert lc.is_ready
        assert lc.device == "cuda"
        assert loader.devices == ["cuda"]

    def test_falls_back_to_cpu(self):
        loader = FakeLoader(fail_on={"cuda"})
        lc = make_lifecycle(loader)
        assert asyncio.run(lc.ensure_ready())
        assert lc.device == "cpu"
        assert loader.devices == ["cuda", "cpu"]

    def test_no_accelerator_goes_straight_to_cpu_loader(self):
        loader = FakeLoader()
        lc = make_lifecycle(loader, accelerator=None)
        assert asyncio.run(lc.ensure_ready())
        assert loader.devices == ["cpu"]
        assert lc.attempts == ["cpu"]

    def test_cpu_only_config_skips_accelerator(self):
        probed = []
        loader = FakeLoader()
        lc = ClassifierLifecycle(
            VerificationConfig(device="cpu"),
            loader=loader,
            accelerator_probe=lambda: probed.append(True) or "cuda",
        )
        assert asyncio.run(lc.ensure_ready())
        assert loader.devices == ["cpu"]
        assert probed == []

    def test_explicit_device_then_cpu(self):
        loader = FakeLoader(fail_on={"mps"})
        lc = make_lifecycle(loader, device="mps")
        assert asyncio.run(lc.ensure_ready())
        assert loader.devices == ["mps", "cpu"]

    def test_probe_error_counts_as_failed_attempt(self):
        def broken_probe():
            raise RuntimeError("driver exploded")

        loader = FakeLoader()
        lc = ClassifierLifecycle(VerificationConfig(), loader=loader, accelerator_probe=broken_probe)
        assert asyncio.run(lc.ensure_ready())
        assert loader.devices == ["cpu"]


class TestFailure:

    def test_both_paths_fail(self):
        loader = FakeLoader(fail_on={"*"})
        lc = make_lifecycle(loader)
        assert asyncio.run(lc.ensure_ready()) is False
        assert lc.state is LifecycleState.FAILED
        assert not lc.is_ready

    def test_failure_is_terminal(self):
        loader = FakeLoader(fail_on={"*"})
        lc = make_lifecycle(loader)
        asyncio.run(lc.ensure_ready())
        loader.fail_on.clear()
        assert asyncio.run(lc.ensure_ready()) is False
        assert loader.devices == ["cuda", "cpu"]


class TestSingleFlight:

    def test_concurrent_callers_share_one_acquisition(self):
        loader = FakeLoader(FakeClassifier(), delay=0.05)
        lc = make_lifecycle(loader)

        async def burst():
            return await asyncio.gather(*(lc.ensure_ready() for _ in range(8)))

        assert asyncio.run(burst()) == [True] * 8
        assert loader.devices == ["cuda"]

    def test_concurrent_callers_share_failure(self):
        loader = FakeLoader(fail_on={"*"}, delay=0.02)
        lc = make_lifecycle(loader)

        async def burst():
            return await asyncio.gather(*(lc.ensure_ready() for _ in range(5)))

        assert asyncio.run(burst()) == [False] * 5
        assert loader.devices == ["cuda", "cpu"]

    def test_state_is_initializing_while_loading(self):
        loader = FakeLoader(delay=0.05)
        lc = make_lifecycle(loader)
        seen = []

        async def watch():
            task = asyncio.ensure_future(lc.ensure_ready())
            await asyncio.sleep(0)
            seen.append(lc.state)
            await task

        asyncio.run(watch())
        assert seen == [LifecycleState.INITIALIZING]
        assert lc.state is LifecycleState.READY

    def test_ready_lifecycle_does_not_reload(self):
        loader = FakeLoader()
        lc = make_lifecycle(loader)
        asyncio.run(lc.ensure_ready())
        asyncio.run(lc.ensure_ready())
        assert loader.devices == ["cuda"]

    def test_stats(self):
        lc = make_lifecycle(FakeLoader())
        asyncio.run(lc.ensure_ready())
        stats = lc.stats()
        assert stats["state"] == "ready"
        assert stats["device"] == "cuda"
        assert stats["attempts"] == ["cuda"]


class TestExecutor:

    def test_loads_on_supplied_executor(self):
        threads = []

        def loader(device):
            threads.append(threading.current_thread().name)
            return FakeClassifier(device=device)

        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="model-load") as pool:
            lc = ClassifierLifecycle(
                VerificationConfig(device="cpu"), loader=loader, executor=pool,
            )
            assert asyncio.run(lc.ensure_ready())

        assert threads and threads[0].startswith("model-load")
