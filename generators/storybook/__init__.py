from .scene_splitter import Scene, decompose, derive_image_description, split_into_units
from .storybook_assembler import StorybookAssembler
from .storybook_model import STORYBOOK_STYLES, Storybook, StorybookMetadata, StorybookPage

__all__ = [
    "STORYBOOK_STYLES",
    "Scene",
    "Storybook",
    "StorybookAssembler",
    "StorybookMetadata",
    "StorybookPage",
    "decompose",
    "derive_image_description",
    "split_into_units",
]
