from sigprof.lifecycle.hooks import Hook, HookChain
from sigprof.models.enums import EventType


def test_recording_hook_satisfies_protocol(make_hook):
    assert isinstance(make_hook(), Hook)
    assert not isinstance(object(), Hook)


def test_hooks_run_in_registration_order(make_hook, journal, recorder):
    chain = HookChain([make_hook("a"), make_hook("b"), make_hook("c")], recorder)

    chain.pre_start()
    chain.post_shutdown()

    assert journal == [
        ("a", "pre_start"), ("b", "pre_start"), ("c", "pre_start"),
        ("a", "post_shutdown"), ("b", "post_shutdown"), ("c", "post_shutdown"),
    ]
    assert recorder.events == []


def test_failing_hook_does_not_stop_the_chain(make_hook, journal, recorder):
    chain = HookChain([make_hook("a", fail_on="pre_start"), make_hook("b")], recorder)

    chain.pre_start()

    assert journal == [("a", "pre_start"), ("b", "pre_start")]
    assert recorder.count("hook failed", EventType.ERROR) == 1
    _, _, attrs = recorder.events[0]
    assert attrs["hook"] == "RecordingHook"
    assert attrs["phase"] == "PRE_START"
    assert "a pre_start failed" in attrs["err"]


def test_post_shutdown_failure_reported_with_phase(make_hook, recorder):
    chain = HookChain([make_hook("a", fail_on="post_shutdown")], recorder)

    chain.pre_start()
    chain.post_shutdown()

    assert [a["phase"] for _, _, a in recorder.events] == ["POST_SHUTDOWN"]


def test_chain_is_a_snapshot(make_hook, recorder):
    hooks = [make_hook("a")]
    chain = HookChain(hooks, recorder)
    hooks.append(make_hook("b"))

    assert len(chain) == 1
    assert [h.name for h in chain] == ["a"]
