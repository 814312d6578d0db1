from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Any

from concierge.application.ports.classifier import ClassifierPort, CodeImagePort
from concierge.application.utils.traveler_code import local_classification
from concierge.domain.entities.classification import Classification


class ClassifyTravelerUseCase:
    """
    Issue a traveler code for the collected preferences.

    The classifier backend is tried first; any failure falls back to the
    deterministic local categorizer. The QR image is optional and its
    failure never blocks code issuance.
    """

    def __init__(
        self,
        classifier: ClassifierPort | None,
        code_images: CodeImagePort | None = None,
        timeout_seconds: float = 20.0,
    ) -> None:
        self._classifier = classifier
        self._code_images = code_images
        self._timeout = timeout_seconds
        self._logger = logging.getLogger(__name__)

    async def execute(self, name: str, email: str, answers: dict[str, Any]) -> Classification:
        classification = await self._classify(name, email, answers)
        if self._code_images is None:
            return classification

        try:
            image_url = await asyncio.wait_for(self._code_images.render(classification.code), timeout=self._timeout)
            return replace(classification, qr_image_url=image_url)
        except Exception as e:
            self._logger.warning(
                "QR image unavailable",
                extra={"code": classification.code, "reason": f"{type(e).__name__}: {e}"},
            )
            return classification

    async def _classify(self, name: str, email: str, answers: dict[str, Any]) -> Classification:
        if self._classifier is not None:
            try:
                result = await asyncio.wait_for(
                    self._classifier.classify(name=name, email=email, preferences=answers),
                    timeout=self._timeout,
                )
                if result.code and result.category:
                    return replace(result, source="primary")
                self._logger.warning("Classifier returned an incomplete result", extra={"reason": "empty code"})
            except Exception as e:
                self._logger.warning(
                    "Classification failed, using local code generator",
                    extra={"source": "fallback", "reason": f"{type(e).__name__}: {e}"},
                )

        fallback = local_classification(name, email, answers)
        self._logger.info(
            "Issued local traveler code",
            extra={"code": fallback.code, "category": fallback.category, "source": "fallback"},
        )
        return fallback
