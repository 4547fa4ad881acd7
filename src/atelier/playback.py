"""Lockstep playback of a video and its narration."""

from typing import Protocol

from .models import VideoBundle


class AudioPlayer(Protocol):
    request_id: str

    def seek(self, seconds: float) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...


class PlaybackSync:
    """Mirror video play/pause events onto the paired narration player."""

    def __init__(self, bundle: VideoBundle, audio: AudioPlayer | None = None) -> None:
        if bundle.narration is None and audio is not None:
            msg = "This video has no narration to play."
            raise ValueError(msg)
        if audio is not None and audio.request_id != bundle.request_id:
            msg = (
                f"Narration player belongs to request {audio.request_id}, "
                f"not {bundle.request_id}"
            )
            raise ValueError(msg)
        self.bundle = bundle
        self.audio = audio

    def on_video_play(self) -> None:
        if self.audio is None:
            return
        self.audio.seek(0.0)
        self.audio.play()

    def on_video_pause(self) -> None:
        if self.audio is not None:
            self.audio.pause()
