"""Exception types shared by the store, the artifact client and the handlers."""


class ArtifactError(RuntimeError):
    """The provider answered but the response carried no usable artifact."""


class UnknownSceneError(LookupError):
    """A store operation referenced a scene number that is not in the production."""

    def __init__(self, scene_number: int):
        super().__init__(f"No scene numbered {scene_number} in this production")
        self.scene_number = scene_number
