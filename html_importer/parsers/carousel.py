"""
Carousel parser.

One row per image: [img, other content of the slide holding the image].
Slides are the children of the images' common ancestor.
"""

from ..cells import is_block_cell_array
from ..dom import common_ancestor, contains, element_children
from . import block


def parse(element, context):
    rows = block.parse(element, context) or []
    if not is_block_cell_array(rows):
        return []

    images = element.find_all("img")
    if len(images) == 1 and not element_children(images[0]):
        return [[images[0]]]

    slides = element_children(common_ancestor(images))
    image_rows = []
    for img in images:
        slide = next((child for child in slides if contains(child, img)), None)
        content = [child for child in element_children(slide) if not contains(child, img)]
        image_rows.append([img, content])

    return [*rows, *image_rows]
