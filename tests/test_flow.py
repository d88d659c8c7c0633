import os
import shutil
from dataclasses import replace

import pytest

from adstudio.clients import Voice
from adstudio.errors import ConfigError, NetworkError, UpstreamError, VoiceUnavailableError
from adstudio.flow import (
    SAMPLE_TEXT,
    AdBuilderFlow,
    AdBuilderState,
    ScriptEdited,
    ScriptFailed,
    ScriptRequested,
    TargetChanged,
    VoiceRejected,
    can_generate_audio,
    can_shorten,
    reduce,
    status_line,
)
from adstudio.services.clip_store import ClipStore
from adstudio.services.duration import Verdict

SHORT_SCRIPT = "Acme ships fast. Order today at acme dot com."
LONG_SCRIPT = "word " * 100  # about 43 seconds


class StubScriptClient:
    def __init__(self, script=SHORT_SCRIPT, shortened=SHORT_SCRIPT, error=None):
        self.script = script
        self.shortened = shortened
        self.error = error
        self.calls = []

    def generate(self, brand_name, description, target_seconds):
        self.calls.append(("generate", brand_name, description, target_seconds))
        if self.error:
            raise self.error
        return self.script

    def shorten(self, script, target_seconds, brand_name=""):
        self.calls.append(("shorten", script, target_seconds, brand_name))
        if self.error:
            raise self.error
        return self.shortened


class StubVoiceClient:
    def __init__(self, voices=(Voice("v-rachel", "Rachel", "premade"),), error=None):
        self.voices = list(voices)
        self.error = error

    def list_voices(self):
        if self.error:
            raise self.error
        return self.voices


class StubAudioClient:
    def __init__(self, error=None, sample_error=None):
        self.error = error
        self.sample_error = sample_error
        self.calls = []

    def synthesize(self, script, voice_id):
        self.calls.append((script, voice_id))
        if script == SAMPLE_TEXT and self.sample_error:
            raise self.sample_error
        if script != SAMPLE_TEXT and self.error:
            raise self.error
        return f"audio#{len(self.calls)}".encode()


@pytest.fixture
def clips(tmp_path):
    return ClipStore(clip_dir=str(tmp_path / "clips"))


def make_flow(clips, script_client=None, voice_client=None, audio_client=None):
    return AdBuilderFlow(
        script_client=script_client or StubScriptClient(),
        voice_client=voice_client or StubVoiceClient(),
        audio_client=audio_client or StubAudioClient(),
        clip_store=clips,
    )


# ---------- reducer ----------


def test_editing_script_recomputes_estimate_and_check():
    state = reduce(AdBuilderState(words_per_minute=140, pause_buffer=1.0), ScriptEdited("word " * 70))
    assert state.estimate_seconds == pytest.approx(30.0)
    assert state.check.verdict is Verdict.FITS

    state = reduce(state, ScriptEdited("word " * 71))
    assert state.check.verdict is Verdict.OVERFLOW


def test_changing_target_recomputes_check_only():
    state = reduce(AdBuilderState(), ScriptEdited(LONG_SCRIPT))
    assert state.check.verdict is Verdict.OVERFLOW

    wider = reduce(state, TargetChanged(45))
    assert wider.estimate_seconds == state.estimate_seconds
    assert wider.check.verdict is Verdict.FITS


def test_blank_script_has_no_check():
    state = reduce(AdBuilderState(), ScriptEdited("   "))
    assert state.check is None
    assert status_line(state) is None
    assert not can_generate_audio(state)


def test_failure_resets_busy_flag():
    state = reduce(AdBuilderState(), ScriptRequested())
    assert state.script_busy
    state = reduce(state, ScriptFailed("Failed to generate script. Please try again."))
    assert not state.script_busy
    assert state.notice.level == "error"


def test_voice_rejected_clears_selection():
    state = replace(AdBuilderState(), selected_voice="v-premium", audio_busy=True)
    state = reduce(state, VoiceRejected("not for free users"))
    assert state.selected_voice == ""
    assert not state.audio_busy
    assert state.notice.title == "Voice Unavailable"


def test_reduce_does_not_mutate():
    before = AdBuilderState()
    after = reduce(before, ScriptEdited("hello there"))
    assert before.script == ""
    assert after is not before


def test_unknown_action():
    with pytest.raises(TypeError):
        reduce(AdBuilderState(), object())


# ---------- controller ----------


def test_acme_script_that_fits_enables_audio(clips):
    flow = make_flow(clips)
    flow.set_form("Acme", "fast shipping")
    flow.set_target(30)
    flow.load_voices()
    flow.generate_script()
    flow.select_voice("v-rachel")

    state = flow.state
    assert state.script == SHORT_SCRIPT
    assert state.check.verdict is Verdict.FITS
    assert status_line(state).startswith("Script duration:")
    assert can_generate_audio(state)


def test_acme_script_that_overflows_disables_audio(clips):
    audio = StubAudioClient()
    flow = make_flow(clips, script_client=StubScriptClient(script=LONG_SCRIPT), audio_client=audio)
    flow.set_form("Acme", "fast shipping")
    flow.generate_script()
    flow.select_voice("v-rachel")

    state = flow.state
    assert state.check.verdict is Verdict.OVERFLOW
    assert status_line(state).startswith("Script is too long!")
    assert not can_generate_audio(state)
    assert can_shorten(state)

    calls_before = len(audio.calls)
    state = flow.generate_audio()
    assert state.notice.title == "Script Too Long"
    assert len(audio.calls) == calls_before


def test_missing_fields_make_no_network_call(clips):
    scripts = StubScriptClient()
    flow = make_flow(clips, script_client=scripts)
    flow.set_form("Acme", "  ")
    state = flow.generate_script()
    assert state.notice.title == "Missing Information"
    assert scripts.calls == []
    assert not state.script_busy


def test_script_failure_shows_generic_message(clips):
    flow = make_flow(clips, script_client=StubScriptClient(error=NetworkError("refused")))
    flow.set_form("Acme", "fast shipping")
    state = flow.generate_script()
    assert state.notice.text == "Failed to generate script. Please try again."
    assert not state.script_busy
    assert state.script == ""


def test_config_failure_names_the_missing_setting(clips):
    flow = make_flow(clips, script_client=StubScriptClient(error=ConfigError("OPENAI_API_KEY is not configured")))
    flow.set_form("Acme", "fast shipping")
    assert flow.generate_script().notice.text == "OPENAI_API_KEY is not configured"


def test_shorten_replaces_script(clips):
    scripts = StubScriptClient(script=LONG_SCRIPT)
    flow = make_flow(clips, script_client=scripts)
    flow.set_form("Acme", "fast shipping")
    flow.generate_script()

    state = flow.shorten_script()
    assert scripts.calls[-1] == ("shorten", LONG_SCRIPT, 30, "Acme")
    assert state.script == SHORT_SCRIPT
    assert state.check.fits
    assert not can_shorten(state)


def test_shorten_is_noop_when_script_fits(clips):
    scripts = StubScriptClient()
    flow = make_flow(clips, script_client=scripts)
    flow.set_form("Acme", "fast shipping")
    flow.generate_script()
    flow.shorten_script()
    assert [c[0] for c in scripts.calls] == ["generate"]


def test_voices_failure(clips):
    flow = make_flow(clips, voice_client=StubVoiceClient(error=UpstreamError("down")))
    state = flow.load_voices()
    assert state.voices == ()
    assert not state.voices_busy
    assert state.notice.text == "Failed to load available voices. Please try again later."


def test_select_voice_plays_sample(clips):
    audio = StubAudioClient()
    flow = make_flow(clips, audio_client=audio)
    state = flow.select_voice("v-rachel")
    assert audio.calls == [(SAMPLE_TEXT, "v-rachel")]
    assert os.path.exists(state.sample_path)
    assert not state.sample_busy


def test_restricted_sample_clears_voice_with_distinct_message(clips):
    audio = StubAudioClient(sample_error=VoiceUnavailableError("This voice is not available for free users."))
    flow = make_flow(clips, audio_client=audio)
    state = flow.select_voice("v-premium")
    assert state.selected_voice == ""
    assert state.notice.title == "Voice Unavailable"
    assert state.notice.text == "This voice is not available for free users."


def test_voice_unavailable_on_generate_clears_voice(clips):
    audio = StubAudioClient(error=VoiceUnavailableError("This voice is not available for free users."))
    flow = make_flow(clips, audio_client=audio)
    flow.set_form("Acme", "fast shipping")
    flow.generate_script()
    flow.select_voice("v-premium")

    state = flow.generate_audio()
    assert state.selected_voice == ""
    assert state.notice.title == "Voice Unavailable"
    assert state.notice.text != "Failed to generate audio. Please try again."
    assert not state.audio_busy
    assert state.audio_path is None


def test_generic_audio_failure_keeps_voice(clips):
    flow = make_flow(clips, audio_client=StubAudioClient(error=UpstreamError("500")))
    flow.set_form("Acme", "fast shipping")
    flow.generate_script()
    flow.select_voice("v-rachel")

    state = flow.generate_audio()
    assert state.selected_voice == "v-rachel"
    assert state.notice.title == "Error"
    assert state.notice.text == "Failed to generate audio. Please try again."
    assert not state.audio_busy


def test_generate_audio_needs_voice(clips):
    audio = StubAudioClient()
    flow = make_flow(clips, audio_client=audio)
    flow.set_form("Acme", "fast shipping")
    flow.generate_script()
    state = flow.generate_audio()
    assert state.notice.title == "Missing Information"
    assert audio.calls == []


def test_second_audio_releases_first_clip(clips):
    flow = make_flow(clips)
    flow.set_form("Acme", "fast shipping")
    flow.generate_script()
    flow.select_voice("v-rachel")

    first = flow.generate_audio().audio_path
    assert os.path.exists(first)

    second = flow.generate_audio().audio_path
    assert second != first
    assert not os.path.exists(first)
    assert os.path.exists(second)
    assert first not in clips.held


def test_changing_voice_releases_previous_sample(clips):
    flow = make_flow(clips)
    first = flow.select_voice("v-rachel").sample_path
    second = flow.select_voice("v-adam").sample_path
    assert not os.path.exists(first)
    assert os.path.exists(second)


def test_close_releases_everything(clips):
    flow = make_flow(clips)
    flow.set_form("Acme", "fast shipping")
    flow.generate_script()
    flow.select_voice("v-rachel")
    state = flow.generate_audio()
    paths = [state.audio_path, state.sample_path]

    flow.close()
    assert not any(os.path.exists(p) for p in paths)
    assert clips.held == set()
    assert flow.state.audio_path is None


def test_clip_write_failure_resets_audio_busy(clips):
    flow = make_flow(clips)
    flow.set_form("Acme", "fast shipping")
    flow.generate_script()
    flow.select_voice("v-rachel")
    shutil.rmtree(clips.clip_dir)

    state = flow.generate_audio()
    assert not state.audio_busy
    assert state.audio_path is None
    assert state.notice.text == "Failed to generate audio. Please try again."
    assert can_generate_audio(state)


def test_sample_write_failure_resets_sample_busy(clips):
    shutil.rmtree(clips.clip_dir)
    flow = make_flow(clips)

    state = flow.select_voice("v-rachel")
    assert not state.sample_busy
    assert state.sample_path is None
    assert state.notice.text == "Failed to generate voice sample. Please try again."
