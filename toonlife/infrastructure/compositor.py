"""
Compositor Visual
Rasteriza un VisualFrame resuelto en una imagen RGB a la resolución de
exportación.
"""
import logging
from typing import Callable, Optional

from PIL import Image, ImageColor, ImageDraw, ImageFont, ImageOps

from ..config import EngineConfig
from ..domain.models import DrawableItem, VisualFrame
from ..errors import AssetUnavailable

logger = logging.getLogger(__name__)

ImageLookup = Callable[[str], Optional[Image.Image]]


class FrameCompositor:
    """Dibuja fondo + elementos en orden usando Pillow."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.width = self.config.export_width
        self.height = self.config.export_height
        self._fonts: dict[tuple[str, int], ImageFont.ImageFont] = {}
        self._warned: set[str] = set()
        # Fondo ya escalado a la resolución de exportación, por referencia
        self._backgrounds: dict[tuple[str, tuple[int, int]], Image.Image] = {}

    def _warn_once(self, key: str, message: str) -> None:
        if key not in self._warned:
            self._warned.add(key)
            logger.warning(message)

    def compose(self, frame: VisualFrame, images: ImageLookup) -> Image.Image:
        """
        Rasteriza un frame.

        Args:
            frame: Frame resuelto (elementos ya en orden de dibujo)
            images: Función ref -> imagen cargada (o None si no está)

        Returns:
            Imagen RGB de export_width x export_height
        """
        canvas = self._background(frame.background, images)
        for item in frame.items:
            try:
                self._draw_item(canvas, item, images)
            except (AssetUnavailable, ValueError, OSError) as e:
                self._warn_once(item.instance_id, f"No se pudo dibujar {item.kind} {item.instance_id}: {e}")
        return canvas

    def _background(self, ref: str, images: ImageLookup) -> Image.Image:
        size = (self.width, self.height)
        cached = self._backgrounds.get((ref, size))
        if cached is not None:
            return cached.copy()

        source = images(ref) if ref else None
        if source is None:
            if ref:
                self._warn_once(ref, f"Fondo no disponible, usando negro: {ref}")
            return Image.new("RGB", size, (0, 0, 0))

        background = source.convert("RGB").resize(size, Image.Resampling.LANCZOS)
        self._backgrounds[(ref, size)] = background
        return background.copy()

    def _draw_item(self, canvas: Image.Image, item: DrawableItem, images: ImageLookup) -> None:
        sx, sy = self.config.stage_scale
        box_w = item.width * item.scale * sx
        box_h = item.height * item.scale * sy
        if box_w < 1 or box_h < 1:
            return

        # La caja se escala y rota alrededor de su centro
        center_x = (item.x + item.width / 2) * sx
        center_y = (item.y + item.height / 2) * sy

        if item.kind == "text":
            layer = self._render_text(item, box_w, box_h, sy)
        else:
            source = images(item.image) if item.image else None
            if source is None:
                raise AssetUnavailable(item.image or item.asset_id, "imagen no cargada")
            layer = source.convert("RGBA").resize((round(box_w), round(box_h)), Image.Resampling.LANCZOS)

        if item.flip_h:
            layer = ImageOps.mirror(layer)
        if item.rotation:
            # Pillow rota en sentido antihorario
            layer = layer.rotate(-item.rotation, resample=Image.Resampling.BICUBIC, expand=True)

        position = (round(center_x - layer.width / 2), round(center_y - layer.height / 2))
        canvas.paste(layer, position, layer)

    def _render_text(self, item: DrawableItem, box_w: float, box_h: float, sy: float) -> Image.Image:
        size = max(1, round((item.font_size or 1) * item.scale * sy))
        font = self._font(item.font_family or "", size)
        fill = ImageColor.getrgb(item.color or "#FFFFFF")

        layer = Image.new("RGBA", (round(box_w), round(box_h)), (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        text = item.text or ""
        left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
        x = (layer.width - (right - left)) / 2 - left
        y = (layer.height - (bottom - top)) / 2 - top
        draw.text((x, y), text, font=font, fill=fill)
        return layer

    def _font(self, family: str, size: int) -> ImageFont.ImageFont:
        key = (family, size)
        if key in self._fonts:
            return self._fonts[key]

        candidates = []
        if family:
            candidates += [family, f"{family}.ttf", f"{family.replace(' ', '')}.ttf"]
        candidates.append(self.config.default_font)

        font = None
        for name in candidates:
            try:
                font = ImageFont.truetype(name, size)
                break
            except OSError:
                continue
        if font is None:
            self._warn_once(f"font:{family}", f"Fuente '{family}' no encontrada, usando la fuente por defecto")
            font = ImageFont.load_default(size=size)

        self._fonts[key] = font
        return font
