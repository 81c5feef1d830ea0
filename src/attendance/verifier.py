# src/attendance/verifier.py
"""Face verification capability.

:class:`StubFaceVerifier` performs no recognition: it always succeeds and
fingerprints the photo by its leading bytes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from realtycrm.actor.models import FaceVerificationResult

FINGERPRINT_BYTES = 32


class BaseFaceVerifier(ABC):

    @abstractmethod
    async def verify(self, photo: bytes) -> FaceVerificationResult:
        """Verify the face in ``photo``."""


class StubFaceVerifier(BaseFaceVerifier):

    def __init__(self, confidence_score: int = 95) -> None:
        self.confidence_score = confidence_score

    async def verify(self, photo: bytes) -> FaceVerificationResult:
        return FaceVerificationResult(
            is_success=True,
            confidence_score=self.confidence_score,
            message="Face captured and verified successfully",
            face_data_hash=photo[:FINGERPRINT_BYTES].hex(),
        )
