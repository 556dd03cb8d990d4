"""Supported target formats."""

from fastapi import APIRouter

from ..core.dimensions import DIMENSION_TABLE

router = APIRouter()


@router.get("/")
async def list_formats():
    """Every format with its canvas size."""
    return [
        {
            "format": fmt.value,
            "width": dims.width,
            "height": dims.height,
        }
        for fmt, dims in DIMENSION_TABLE.items()
    ]
