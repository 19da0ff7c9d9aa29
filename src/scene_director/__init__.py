"""Scene Director — storyboard, imagery and narration orchestration for voiceover scripts."""

__version__ = "0.1.0"
