"""
flow.py

The ad builder's front-end state and its transitions.

All state lives in one frozen `AdBuilderState`. `reduce(state, action)` is
the only place it changes: editing the script recomputes the estimate, and
a new estimate or target recomputes the duration check. `AdBuilderFlow`
performs the proxy calls, turns their outcomes into actions and owns the
audio clips the state points at.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple, Union

from loguru import logger

from adstudio.clients import AudioClient, ScriptClient, Voice, VoiceCatalogClient
from adstudio.config import SPEECH_PAUSE_BUFFER, SPEECH_WORDS_PER_MINUTE
from adstudio.errors import AdStudioError, ConfigError, VoiceUnavailableError
from adstudio.services import duration
from adstudio.services.clip_store import ClipStore


SAMPLE_TEXT = "Hello! This is a sample of my voice. How do I sound?"


@dataclass(frozen=True)
class Notice:
    level: str  # "success" | "error" | "warning"
    title: str
    text: str


@dataclass(frozen=True)
class AdBuilderState:
    brand_name: str = ""
    description: str = ""
    target_seconds: int = duration.DEFAULT_TARGET_SECONDS
    script: str = ""
    estimate_seconds: float = 0.0
    check: Optional[duration.DurationCheck] = None
    voices: Tuple[Voice, ...] = ()
    selected_voice: str = ""
    sample_path: Optional[str] = None
    audio_path: Optional[str] = None
    script_busy: bool = False
    audio_busy: bool = False
    sample_busy: bool = False
    voices_busy: bool = False
    notice: Optional[Notice] = None
    words_per_minute: float = field(default=SPEECH_WORDS_PER_MINUTE, repr=False)
    pause_buffer: float = field(default=SPEECH_PAUSE_BUFFER, repr=False)


# ==================== ACTIONS ====================


@dataclass(frozen=True)
class FormEdited:
    brand_name: str
    description: str


@dataclass(frozen=True)
class TargetChanged:
    seconds: int


@dataclass(frozen=True)
class ScriptRequested:
    pass


@dataclass(frozen=True)
class ScriptReceived:
    text: str
    message: str = "Your script has been generated!"


@dataclass(frozen=True)
class ScriptFailed:
    message: str


@dataclass(frozen=True)
class ScriptEdited:
    text: str


@dataclass(frozen=True)
class VoicesRequested:
    pass


@dataclass(frozen=True)
class VoicesLoaded:
    voices: Tuple[Voice, ...]


@dataclass(frozen=True)
class VoicesFailed:
    message: str


@dataclass(frozen=True)
class VoiceSelected:
    voice_id: str


@dataclass(frozen=True)
class SampleReady:
    path: str


@dataclass(frozen=True)
class SampleFailed:
    message: str


@dataclass(frozen=True)
class VoiceRejected:
    message: str


@dataclass(frozen=True)
class AudioRequested:
    pass


@dataclass(frozen=True)
class AudioReady:
    path: str


@dataclass(frozen=True)
class AudioFailed:
    message: str


@dataclass(frozen=True)
class Refused:
    title: str
    message: str


@dataclass(frozen=True)
class NoticeDismissed:
    pass


@dataclass(frozen=True)
class Closed:
    pass


Action = Union[
    FormEdited, TargetChanged, ScriptRequested, ScriptReceived, ScriptFailed, ScriptEdited,
    VoicesRequested, VoicesLoaded, VoicesFailed, VoiceSelected, SampleReady, SampleFailed,
    VoiceRejected, AudioRequested, AudioReady, AudioFailed, Refused, NoticeDismissed, Closed,
]


def _error(title: str, text: str) -> Notice:
    return Notice(level="error", title=title, text=text)


def _with_check(state: AdBuilderState) -> AdBuilderState:
    if not state.script.strip():
        return replace(state, check=None)
    return replace(state, check=duration.evaluate(state.estimate_seconds, state.target_seconds))


def _with_script(state: AdBuilderState, text: str) -> AdBuilderState:
    seconds = duration.estimate(text, state.words_per_minute, state.pause_buffer)
    return _with_check(replace(state, script=text, estimate_seconds=seconds))


def reduce(state: AdBuilderState, action: Action) -> AdBuilderState:
    if isinstance(action, FormEdited):
        return replace(state, brand_name=action.brand_name, description=action.description)

    if isinstance(action, TargetChanged):
        return _with_check(replace(state, target_seconds=action.seconds))

    if isinstance(action, ScriptRequested):
        return replace(state, script_busy=True, notice=None)
    if isinstance(action, ScriptReceived):
        state = replace(state, script_busy=False, notice=Notice("success", "Success", action.message))
        return _with_script(state, action.text)
    if isinstance(action, ScriptFailed):
        return replace(state, script_busy=False, notice=_error("Error", action.message))
    if isinstance(action, ScriptEdited):
        return _with_script(state, action.text)

    if isinstance(action, VoicesRequested):
        return replace(state, voices_busy=True)
    if isinstance(action, VoicesLoaded):
        return replace(state, voices_busy=False, voices=tuple(action.voices))
    if isinstance(action, VoicesFailed):
        return replace(state, voices_busy=False, notice=_error("Error", action.message))

    if isinstance(action, VoiceSelected):
        return replace(
            state,
            selected_voice=action.voice_id,
            sample_path=None,
            sample_busy=bool(action.voice_id),
            notice=None,
        )
    if isinstance(action, SampleReady):
        return replace(state, sample_busy=False, sample_path=action.path)
    if isinstance(action, SampleFailed):
        return replace(state, sample_busy=False, selected_voice="", notice=_error("Error", action.message))
    if isinstance(action, VoiceRejected):
        return replace(
            state,
            sample_busy=False,
            audio_busy=False,
            selected_voice="",
            notice=_error("Voice Unavailable", action.message),
        )

    if isinstance(action, AudioRequested):
        return replace(state, audio_busy=True, notice=None)
    if isinstance(action, AudioReady):
        return replace(
            state,
            audio_busy=False,
            audio_path=action.path,
            notice=Notice("success", "Audio Generated", "Your audio ad has been created successfully!"),
        )
    if isinstance(action, AudioFailed):
        return replace(state, audio_busy=False, notice=_error("Error", action.message))

    if isinstance(action, Refused):
        return replace(state, notice=_error(action.title, action.message))
    if isinstance(action, NoticeDismissed):
        return replace(state, notice=None)
    if isinstance(action, Closed):
        return replace(state, audio_path=None, sample_path=None)

    raise TypeError(f"Unknown action: {action!r}")


# ==================== DERIVED VIEW ====================


def is_overflowing(state: AdBuilderState) -> bool:
    return state.check is not None and not state.check.fits


def can_generate_script(state: AdBuilderState) -> bool:
    return not state.script_busy


def can_generate_audio(state: AdBuilderState) -> bool:
    return (
        bool(state.script.strip())
        and bool(state.selected_voice)
        and not state.audio_busy
        and not is_overflowing(state)
    )


def can_shorten(state: AdBuilderState) -> bool:
    return is_overflowing(state) and not state.script_busy


def status_line(state: AdBuilderState) -> Optional[str]:
    if state.check is None:
        return None
    return duration.describe(state.check, state.estimate_seconds, state.target_seconds)


# ==================== CONTROLLER ====================


def _failure_text(error: AdStudioError, generic: str) -> str:
    # Missing configuration will not fix itself on retry, so show what is missing
    if isinstance(error, ConfigError):
        return error.message
    return generic


class AdBuilderFlow:
    """Runs the ad builder's operations against the proxy clients."""

    def __init__(
        self,
        script_client: ScriptClient,
        voice_client: VoiceCatalogClient,
        audio_client: AudioClient,
        clip_store: ClipStore,
        state: AdBuilderState = None,
    ):
        self.script_client = script_client
        self.voice_client = voice_client
        self.audio_client = audio_client
        self.clip_store = clip_store
        self.state = state or AdBuilderState()

    def dispatch(self, action: Action) -> AdBuilderState:
        self.state = reduce(self.state, action)
        return self.state

    # ---------- form ----------

    def set_form(self, brand_name: str, description: str) -> AdBuilderState:
        return self.dispatch(FormEdited(brand_name, description))

    def set_target(self, seconds: int) -> AdBuilderState:
        return self.dispatch(TargetChanged(int(seconds)))

    def edit_script(self, text: str) -> AdBuilderState:
        return self.dispatch(ScriptEdited(text))

    def dismiss_notice(self) -> AdBuilderState:
        return self.dispatch(NoticeDismissed())

    # ---------- script ----------

    def generate_script(self) -> AdBuilderState:
        state = self.state
        if not can_generate_script(state):
            return state
        if not state.brand_name.strip() or not state.description.strip():
            return self.dispatch(Refused("Missing Information", "Please fill in all fields"))

        self.dispatch(ScriptRequested())
        try:
            script = self.script_client.generate(
                state.brand_name.strip(), state.description.strip(), state.target_seconds
            )
        except AdStudioError as e:
            logger.error(f"Script generation error: {e}")
            return self.dispatch(ScriptFailed(_failure_text(e, "Failed to generate script. Please try again.")))
        return self.dispatch(ScriptReceived(script))

    def shorten_script(self) -> AdBuilderState:
        state = self.state
        if not can_shorten(state):
            return state

        self.dispatch(ScriptRequested())
        try:
            script = self.script_client.shorten(state.script, state.target_seconds, state.brand_name.strip())
        except AdStudioError as e:
            logger.error(f"Script shortening error: {e}")
            return self.dispatch(ScriptFailed(_failure_text(e, "Failed to shorten script. Please try again.")))
        return self.dispatch(ScriptReceived(script, "Your script has been shortened!"))

    # ---------- voices ----------

    def load_voices(self) -> AdBuilderState:
        self.dispatch(VoicesRequested())
        try:
            voices = self.voice_client.list_voices()
        except AdStudioError as e:
            logger.error(f"Error fetching voices: {e}")
            return self.dispatch(
                VoicesFailed(_failure_text(e, "Failed to load available voices. Please try again later."))
            )
        return self.dispatch(VoicesLoaded(tuple(voices)))

    def select_voice(self, voice_id: str) -> AdBuilderState:
        """Select a voice and fetch its sample clip."""
        self.clip_store.release(self.state.sample_path)
        self.dispatch(VoiceSelected(voice_id or ""))
        if not voice_id:
            return self.state

        try:
            audio = self.audio_client.synthesize(SAMPLE_TEXT, voice_id)
            path = self.clip_store.save(audio, prefix="sample")
        except VoiceUnavailableError as e:
            return self.dispatch(VoiceRejected(e.message))
        except AdStudioError as e:
            logger.error(f"Sample audio generation error: {e}")
            return self.dispatch(
                SampleFailed(_failure_text(e, "Failed to generate voice sample. Please try again."))
            )
        except OSError as e:
            logger.error(f"Could not store voice sample: {e}")
            return self.dispatch(SampleFailed("Failed to generate voice sample. Please try again."))

        self.clip_store.release(self.state.sample_path)
        return self.dispatch(SampleReady(path))

    # ---------- audio ----------

    def generate_audio(self) -> AdBuilderState:
        state = self.state
        if state.audio_busy:
            return state
        if not state.script.strip() or not state.selected_voice:
            return self.dispatch(
                Refused("Missing Information", "Please generate a script and select a voice first")
            )
        if is_overflowing(state):
            return self.dispatch(
                Refused("Script Too Long", duration.overflow_notice(state.estimate_seconds, state.target_seconds))
            )

        self.dispatch(AudioRequested())
        try:
            audio = self.audio_client.synthesize(state.script, state.selected_voice)
            path = self.clip_store.save(audio, prefix="ad")
        except VoiceUnavailableError as e:
            return self.dispatch(VoiceRejected(e.message))
        except AdStudioError as e:
            logger.error(f"Audio generation error: {e}")
            return self.dispatch(AudioFailed(_failure_text(e, "Failed to generate audio. Please try again.")))
        except OSError as e:
            logger.error(f"Could not store audio clip: {e}")
            return self.dispatch(AudioFailed("Failed to generate audio. Please try again."))

        # the superseded clip goes before the new one is installed
        self.clip_store.release(self.state.audio_path)
        return self.dispatch(AudioReady(path))

    def close(self) -> None:
        """Release every clip this flow holds."""
        self.clip_store.release(self.state.audio_path)
        self.clip_store.release(self.state.sample_path)
        self.dispatch(Closed())
