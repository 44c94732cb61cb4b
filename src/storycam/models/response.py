"""
Face Detection Response Schema
==============================

Pydantic models for the JSON payload returned by the inference endpoint.

Response Contract:
    {
        "faces": [
            {
                "timestamp": 0,
                "face": {
                    "confidence": 99.9,
                    "boundingBox": {"width": 0.3, "height": 0.4, "left": 0.2, "top": 0.1},
                    "emotions": [
                        {"type": "HAPPY", "confidence": 87.5},
                        {"type": "CALM", "confidence": 10.2}
                    ]
                }
            }
        ],
        "videoMetadata": {
            "codec": "h264",
            "durationMillis": 5000,
            "format": "QuickTime / MOV",
            "frameRate": 30.0,
            "frameHeight": 1920,
            "frameWidth": 1080
        }
    }

Keys are camelCase on the wire. PascalCase keys (as produced by a raw
Rekognition GetFaceDetection result) are accepted too, and snake_case
field names work when building records in Python.

Records are frozen after parse and live only for one results session.

Example:
    from storycam.models.response import FaceDetectionResponse

    response = FaceDetectionResponse.parse(http_response.content)
    for face in response.detected_faces():
        print(face.dominant_emotion())
"""

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from storycam.errors import ResponseParseError


class _WireModel(BaseModel):
    """Base for server records: camelCase aliases, frozen, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def _lower_pascal_keys(cls, data: Any) -> Any:
        # "DurationMillis" -> "durationMillis"
        if isinstance(data, dict):
            return {
                (key[:1].lower() + key[1:] if isinstance(key, str) and key[:1].isupper() else key): value
                for key, value in data.items()
            }
        return data


class Emotion(_WireModel):
    """
    A single emotion entry attached to a detected face.

    Attributes:
        type: Emotion label, e.g. HAPPY, SAD, CALM
        confidence: Confidence score reported by the server
    """

    type: str = Field(..., description="Emotion label (HAPPY, SAD, ...)")
    confidence: float = Field(..., ge=0.0, description="Confidence score")


class BoundingBox(_WireModel):
    """Face bounding box as ratios of the frame size."""

    width: Optional[float] = None
    height: Optional[float] = None
    left: Optional[float] = None
    top: Optional[float] = None


class Face(_WireModel):
    """
    A detected face.

    Attributes:
        confidence: Detection confidence
        bounding_box: Location of the face in the frame, if sent
        emotions: Emotion entries for this face
    """

    confidence: float = Field(..., ge=0.0, description="Face detection confidence")
    bounding_box: Optional[BoundingBox] = Field(default=None)
    emotions: List[Emotion] = Field(default_factory=list)

    def dominant_emotion(self) -> Optional[Emotion]:
        """Return the highest-confidence emotion, or None when there are none."""
        if not self.emotions:
            return None
        return max(self.emotions, key=lambda emotion: emotion.confidence)


class FaceDetection(_WireModel):
    """A face together with the video timestamp it was seen at."""

    timestamp: Optional[int] = Field(default=None, description="Milliseconds from start")
    face: Face


class VideoMetadata(_WireModel):
    """Metadata of the uploaded recording as reported by the server."""

    codec: Optional[str] = None
    duration_millis: Optional[int] = None
    format: Optional[str] = None
    frame_rate: Optional[float] = None
    frame_height: Optional[int] = None
    frame_width: Optional[int] = None


class FaceDetectionResponse(_WireModel):
    """
    Complete server response for one uploaded recording.

    Attributes:
        faces: Per-timestamp face detections
        video_metadata: Metadata of the uploaded video, if reported
    """

    faces: List[FaceDetection] = Field(default_factory=list)
    video_metadata: Optional[VideoMetadata] = None

    @classmethod
    def parse(cls, raw: Union[bytes, str]) -> "FaceDetectionResponse":
        """
        Parse a raw JSON body.

        Args:
            raw: Response body

        Returns:
            Parsed response

        Raises:
            ResponseParseError: If the body is not valid JSON or does not
                match the schema
        """
        try:
            return cls.model_validate_json(raw)
        except ValidationError as e:
            raise ResponseParseError(f"Error parsing upload response: {e}") from e

    def detected_faces(self) -> List[Face]:
        """Faces unwrapped from their detections, in server order."""
        return [detection.face for detection in self.faces]
