from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import glfw
import moderngl
import numpy as np
from PIL import Image

from fauna import (
    AnimalRecord,
    BoundaryGeometry,
    Camera,
    FrameScheduler,
    FrameSnapshot,
    HoverEvent,
    HoverEventKind,
    Marker,
    MarkerHandle,
    filter_records,
    project_array,
)
from fauna.scheduler import FrameCallback

from .config import (
    THEME_BACKGROUND,
    THEME_BOUNDARY,
    THEME_GRID,
    THEME_GRID_ALPHA,
    THEME_STAR,
    ViewerConfig,
)
from .controls import ControlState, FaunaControlPanel
from .geodata import is_remote
from .loaders import AsyncLoader, LoadKind, LoadResult
from .sprites import status_icon, tooltip_image

LOGGER = logging.getLogger(__name__)

CAMERA_ZOOM_STEP = 0.5
DRAG_SENSITIVITY = 0.005
DOUBLE_CLICK_SLOP_PX = 4.0
STAR_FAR_PLANE = 3000.0

ImageKey = Tuple[str, Optional[str]]


class GlobeViewer:
    def __init__(self, config: ViewerConfig | None = None) -> None:
        self.cfg = config or ViewerConfig()
        self._ensure_glfw()
        self.window = self._create_window()

        self.ctx = moderngl.create_context()
        self.ctx.enable(moderngl.DEPTH_TEST)
        self.ctx.enable(moderngl.BLEND)
        self.ctx.enable(moderngl.PROGRAM_POINT_SIZE)
        self.ctx.blend_func = (moderngl.SRC_ALPHA, moderngl.ONE_MINUS_SRC_ALPHA)

        self._grid_vbo = None
        self._grid_vao = None
        self._grid_vertex_count = 0
        self._star_vbo = None
        self._star_vao = None
        self._boundary_vbo = None
        self._boundary_vao = None
        self._boundary_offsets: List[Tuple[int, int, bool]] = []
        self._boundary_uploaded = 0
        self._marker_vbo = None
        self._marker_vao = None
        self._tooltip_vbo = None
        self._tooltip_vao = None
        self._tooltip_texture: moderngl.Texture | None = None
        self._tooltip_key: Tuple[str, str] | None = None
        self._tooltip_size = (0, 0)
        self._icon_textures: Dict[Tuple[str, Optional[str]], moderngl.Texture] = {}
        self._portrait_textures: Dict[ImageKey, moderngl.Texture] = {}

        self._all_records: List[AnimalRecord] = []
        self._portraits: Dict[ImageKey, Image.Image] = {}
        self._failed_images: set[ImageKey] = set()
        self._image_waiters: Dict[ImageKey, List[MarkerHandle]] = {}
        self._image_requests: Dict[MarkerHandle, ImageKey] = {}

        self._pending_frames: List[FrameCallback] = []
        self._drag_active = False
        self._last_cursor: Tuple[float, float] | None = None
        self._last_press: Tuple[float, float, float] | None = None
        self._hand_cursor = glfw.create_standard_cursor(glfw.HAND_CURSOR)

        self._loader = AsyncLoader(max_workers=self.cfg.image_workers, image_size=self.cfg.image_size)
        self._controls = FaunaControlPanel(title=f"{self.cfg.title} - Controls")
        self._scheduler = FrameScheduler(
            self._pending_frames.append,
            self._render_snapshot,
            clock=glfw.get_time,
            marker_radius=self.cfg.marker_radius,
            marker_base_scale=self.cfg.marker_base_scale,
            hover_factor=self.cfg.hover_factor,
        )
        self._scheduler.add_hover_listener(self._on_hover_event)

        self._init_callbacks()
        self._compile_programs()
        self._load_geometry()

        width, height = glfw.get_framebuffer_size(self.window)
        self._camera = Camera(aspect=max(1, width) / max(1, height))
        self._refresh_viewport(width, height)

    @staticmethod
    def _ensure_glfw() -> None:
        if not glfw.init():
            raise RuntimeError("Unable to initialise GLFW")

    def _create_window(self) -> glfw._GLFWwindow:
        glfw.window_hint(glfw.CONTEXT_VERSION_MAJOR, 3)
        glfw.window_hint(glfw.CONTEXT_VERSION_MINOR, 3)
        glfw.window_hint(glfw.OPENGL_PROFILE, glfw.OPENGL_CORE_PROFILE)
        glfw.window_hint(glfw.OPENGL_FORWARD_COMPAT, glfw.TRUE)
        glfw.window_hint(glfw.SAMPLES, 4)
        window = glfw.create_window(self.cfg.width, self.cfg.height, self.cfg.title, None, None)
        if not window:
            glfw.terminate()
            raise RuntimeError("Failed to create GLFW window")
        glfw.make_context_current(window)
        glfw.swap_interval(1)
        return window

    def _init_callbacks(self) -> None:
        glfw.set_framebuffer_size_callback(self.window, self._on_framebuffer_resize)
        glfw.set_cursor_pos_callback(self.window, self._on_cursor_move)
        glfw.set_mouse_button_callback(self.window, self._on_mouse_button)
        glfw.set_scroll_callback(self.window, self._on_scroll)

    def _compile_programs(self) -> None:
        self.line_prog = self.ctx.program(
            vertex_shader="""
                #version 330
                in vec3 in_position;
                uniform mat4 mvp;
                void main() {
                    gl_Position = mvp * vec4(in_position, 1.0);
                }
            """,
            fragment_shader="""
                #version 330
                out vec4 fragColor;
                uniform vec4 line_color;
                void main() {
                    fragColor = line_color;
                }
            """,
        )
        self.star_prog = self.ctx.program(
            vertex_shader="""
                #version 330
                in vec3 in_position;
                uniform mat4 mvp;
                uniform float point_size;
                void main() {
                    gl_Position = mvp * vec4(in_position, 1.0);
                    gl_PointSize = point_size;
                }
            """,
            fragment_shader="""
                #version 330
                out vec4 fragColor;
                uniform vec3 star_color;
                void main() {
                    fragColor = vec4(star_color, 1.0);
                }
            """,
        )
        self.sprite_prog = self.ctx.program(
            vertex_shader="""
                #version 330
                in vec3 in_position;
                in vec2 in_uv;
                uniform mat4 mvp;
                out vec2 v_uv;
                void main() {
                    v_uv = in_uv;
                    gl_Position = mvp * vec4(in_position, 1.0);
                }
            """,
            fragment_shader="""
                #version 330
                in vec2 v_uv;
                uniform sampler2D tex;
                out vec4 fragColor;
                void main() {
                    vec4 texColor = texture(tex, v_uv);
                    if (texColor.a < 0.02) {
                        discard;
                    }
                    fragColor = texColor;
                }
            """,
        )
        self.sprite_prog["tex"].value = 0
        self.overlay_prog = self.ctx.program(
            vertex_shader="""
                #version 330
                in vec2 in_position;
                in vec2 in_uv;
                out vec2 v_uv;
                void main() {
                    v_uv = in_uv;
                    gl_Position = vec4(in_position, 0.0, 1.0);
                }
            """,
            fragment_shader="""
                #version 330
                in vec2 v_uv;
                uniform sampler2D tex;
                out vec4 fragColor;
                void main() {
                    fragColor = texture(tex, v_uv);
                }
            """,
        )
        self.overlay_prog["tex"].value = 0

    def _load_geometry(self) -> None:
        grid = self._build_grid(self.cfg.globe_radius, self.cfg.grid_segments)
        self._grid_vertex_count = grid.shape[0]
        self._grid_vbo = self.ctx.buffer(grid.tobytes())
        self._grid_vao = self.ctx.vertex_array(self.line_prog, [(self._grid_vbo, "3f", "in_position")])

        stars = self._build_starfield(self.cfg.star_count)
        if stars.size:
            self._star_vbo = self.ctx.buffer(stars.tobytes())
            self._star_vao = self.ctx.vertex_array(self.star_prog, [(self._star_vbo, "3f", "in_position")])
        LOGGER.debug("Grid: %d vertices, stars: %d", self._grid_vertex_count, stars.shape[0])

    # ---- main loop ----
    def run(self) -> None:
        self._scheduler.enter_view(self._camera)
        self._controls.update_status("Loading", "Reading animal records")
        self._loader.load_records(self.cfg.records_source)
        self._loader.load_boundaries(
            self.cfg.boundary_source,
            self.cfg.globe_radius,
            download_missing=self.cfg.download_missing_boundaries,
        )
        previous_time = glfw.get_time()
        try:
            while not glfw.window_should_close(self.window):
                current_time = glfw.get_time()
                delta_time = current_time - previous_time
                previous_time = current_time

                if not self._controls.poll():
                    glfw.set_window_should_close(self.window, True)
                    break

                glfw.poll_events()

                if glfw.get_key(self.window, glfw.KEY_ESCAPE) == glfw.PRESS:
                    glfw.set_window_should_close(self.window, True)

                self._apply_control_requests()
                for result in self._loader.poll():
                    self._apply_load_result(result)

                fps_text = f"FPS: {1.0 / delta_time:0.1f}" if delta_time > 1e-6 else "FPS: ?"
                self._controls.set_fps(fps_text)

                self._drain_frame_requests(glfw.get_time())
                glfw.swap_buffers(self.window)
        finally:
            self._cleanup()

    def _drain_frame_requests(self, now: float) -> None:
        callbacks = list(self._pending_frames)
        self._pending_frames.clear()
        if not callbacks:
            self.ctx.clear(*THEME_BACKGROUND, 1.0)
            return
        for callback in callbacks:
            callback(now)

    # ---- controls and loads ----
    def _apply_control_requests(self) -> None:
        changed, state = self._controls.consume_changes()
        if changed:
            self._apply_filter(state)
        record = self._controls.pop_occurrence_request()
        if record is not None:
            markers = self._scheduler.show_occurrences(record)
            self._request_images(markers)
            self._controls.update_status("Ready", f"{len(markers)} occurrences of {record.name}")
        report = self._controls.pop_discrepancy_report()
        if report is not None:
            LOGGER.info("Discrepancy report for %s: %s", report.animal, report.report)
        if self._controls.consume_close_request():
            context = self._scheduler.context
            if context is not None:
                context.hover.close_detail()

    def _apply_filter(self, state: ControlState) -> None:
        records = filter_records(self._all_records, search=state.search, status=state.status)
        markers = self._scheduler.show_records(records)
        self._request_images(markers)
        self._controls.update_status("Ready", f"{len(markers)} animals shown")

    def _apply_load_result(self, result: LoadResult) -> None:
        if result.kind is LoadKind.RECORDS:
            if not result.ok:
                self._controls.update_status("Error", f"Could not load animals: {result.error}")
                return
            self._all_records = list(result.payload)
            LOGGER.info("Loaded %d animal records", len(self._all_records))
            self._apply_filter(self._controls.current_state())
        elif result.kind is LoadKind.BOUNDARIES:
            if not result.ok:
                self._controls.update_status("Ready", "Country boundaries unavailable")
                return
            geometries: Sequence[BoundaryGeometry] = result.payload
            self._scheduler.add_boundaries(geometries)
            LOGGER.info("Loaded %d boundary geometries", len(geometries))
        elif result.kind is LoadKind.IMAGE:
            self._apply_portrait(result)

    def _request_images(self, markers: Sequence[Marker]) -> None:
        for marker in markers:
            record = marker.record
            if not record.img:
                continue
            key: ImageKey = (record.img, record.iucn_status)
            if key in self._failed_images:
                continue
            portrait = self._portraits.get(key)
            if portrait is not None:
                self._set_marker_portrait(marker.handle, portrait)
                continue
            waiters = self._image_waiters.get(key)
            if waiters is not None:
                waiters.append(marker.handle)
                continue
            self._image_waiters[key] = [marker.handle]
            self._image_requests[marker.handle] = key
            self._loader.load_marker_image(marker.handle, record.img, record.iucn_status)

    def _apply_portrait(self, result: LoadResult) -> None:
        key = self._image_requests.pop(result.key, None)
        if key is None:
            return
        waiters = self._image_waiters.pop(key, [])
        if not result.ok:
            self._failed_images.add(key)
            return
        self._portraits[key] = result.payload
        for handle in waiters:
            self._set_marker_portrait(handle, result.payload)

    def _set_marker_portrait(self, handle: MarkerHandle, portrait: Image.Image) -> None:
        context = self._scheduler.context
        if context is not None:
            context.registry.set_appearance(handle, portrait)

    def _on_hover_event(self, event: HoverEvent) -> None:
        if event.kind is HoverEventKind.ENTER:
            glfw.set_cursor(self.window, self._hand_cursor)
        elif event.kind is HoverEventKind.LEAVE:
            glfw.set_cursor(self.window, None)
        elif event.kind is HoverEventKind.SELECT and event.record is not None:
            record = event.record
            portrait = self._portraits.get((record.img, record.iucn_status)) if record.img else None
            self._controls.show_detail(record, portrait)
        elif event.kind is HoverEventKind.DETAIL_CLOSED:
            self._controls.clear_detail()

    # ---- rendering ----
    def _render_snapshot(self, snapshot: FrameSnapshot) -> None:
        self.ctx.clear(*THEME_BACKGROUND, 1.0)
        width, height = glfw.get_framebuffer_size(self.window)
        if width == 0 or height == 0:
            return
        self.ctx.viewport = (0, 0, width, height)

        camera = snapshot.camera
        camera.set_aspect(width, height)
        view = camera.view_matrix()
        mvp = camera.projection_matrix() @ view

        if self._star_vao is not None:
            star_mvp = camera.projection_matrix(far=STAR_FAR_PLANE) @ view
            self.star_prog["mvp"].write(star_mvp.astype("f4").T.tobytes())
            self.star_prog["point_size"].value = 1.5
            self.star_prog["star_color"].value = THEME_STAR
            self._star_vao.render(mode=moderngl.POINTS)

        self.line_prog["mvp"].write(mvp.astype("f4").T.tobytes())
        self.line_prog["line_color"].value = (*THEME_GRID, THEME_GRID_ALPHA)
        self._grid_vao.render(mode=moderngl.LINES, vertices=self._grid_vertex_count)

        if len(snapshot.boundaries) != self._boundary_uploaded:
            self._upload_boundaries(snapshot.boundaries)
        if self._boundary_vao is not None:
            self.line_prog["line_color"].value = (*THEME_BOUNDARY, 1.0)
            for start, count, closed in self._boundary_offsets:
                mode = moderngl.LINE_LOOP if closed else moderngl.LINE_STRIP
                self._boundary_vao.render(mode=mode, first=start, vertices=count)

        self._render_markers(snapshot, mvp)
        if snapshot.tooltip is not None:
            self._render_tooltip(snapshot.tooltip.title, snapshot.tooltip.subtitle,
                                 snapshot.tooltip.screen_x, snapshot.tooltip.screen_y)

    def _upload_boundaries(self, boundaries: Sequence[BoundaryGeometry]) -> None:
        self._release_boundaries()
        segments: List[np.ndarray] = []
        offsets: List[Tuple[int, int, bool]] = []
        start = 0
        for geometry in boundaries:
            for ring in geometry:
                points = ring.points
                if ring.closed and len(points) > 2 and np.allclose(points[0], points[-1]):
                    points = points[:-1]
                if len(points) < 2:
                    continue
                segments.append(np.asarray(points, dtype=np.float32))
                offsets.append((start, len(points), ring.closed))
                start += len(points)
        self._boundary_uploaded = len(boundaries)
        if not segments:
            return
        data = np.vstack(segments)
        self._boundary_vbo = self.ctx.buffer(data.tobytes())
        self._boundary_vao = self.ctx.vertex_array(self.line_prog, [(self._boundary_vbo, "3f", "in_position")])
        self._boundary_offsets = offsets
        LOGGER.debug("Uploaded %d boundary rings (%d vertices)", len(offsets), start)

    def _render_markers(self, snapshot: FrameSnapshot, mvp: np.ndarray) -> None:
        if not snapshot.markers:
            return
        camera = snapshot.camera
        right, up, _forward = camera.basis()
        # Back to front so translucent sprite edges blend over farther ones.
        ordered = sorted(
            snapshot.markers,
            key=lambda t: float(np.linalg.norm(t.position - camera.position)),
            reverse=True,
        )
        corners = ((-0.5, -0.5, 0.0, 0.0), (0.5, -0.5, 1.0, 0.0), (0.5, 0.5, 1.0, 1.0),
                   (-0.5, -0.5, 0.0, 0.0), (0.5, 0.5, 1.0, 1.0), (-0.5, 0.5, 0.0, 1.0))
        data = np.empty((len(ordered) * 6, 5), dtype=np.float32)
        for index, transform in enumerate(ordered):
            for corner, (sx, sy, u, v) in enumerate(corners):
                point = transform.position + (right * sx + up * sy) * transform.scale
                data[index * 6 + corner] = (point[0], point[1], point[2], u, v)

        if self._marker_vbo is None or self._marker_vbo.size < data.nbytes:
            self._release_marker_buffers()
            self._marker_vbo = self.ctx.buffer(reserve=max(data.nbytes, 6 * 5 * 4 * 64), dynamic=True)
            self._marker_vao = self.ctx.vertex_array(
                self.sprite_prog,
                [(self._marker_vbo, "3f 2f", "in_position", "in_uv")],
            )
        self._marker_vbo.write(data.tobytes())

        self.sprite_prog["mvp"].write(mvp.astype("f4").T.tobytes())
        for index, transform in enumerate(ordered):
            self._marker_texture(transform.marker).use(location=0)
            self._marker_vao.render(mode=moderngl.TRIANGLES, first=index * 6, vertices=6)

    def _marker_texture(self, marker: Marker) -> moderngl.Texture:
        record = marker.record
        if marker.appearance is not None and record.img:
            key: ImageKey = (record.img, record.iucn_status)
            texture = self._portrait_textures.get(key)
            if texture is None:
                texture = self._texture_from_image(marker.appearance)
                self._portrait_textures[key] = texture
            return texture
        icon_key = (record.initial, record.iucn_status)
        texture = self._icon_textures.get(icon_key)
        if texture is None:
            texture = self._texture_from_image(status_icon(record.initial, record.iucn_status, size=self.cfg.image_size))
            self._icon_textures[icon_key] = texture
        return texture

    def _render_tooltip(self, title: str, subtitle: str, screen_x: float, screen_y: float) -> None:
        if self._tooltip_key != (title, subtitle):
            if self._tooltip_texture is not None:
                self._tooltip_texture.release()
            image = tooltip_image(title, subtitle)
            self._tooltip_texture = self._texture_from_image(image, mipmaps=False)
            self._tooltip_size = image.size
            self._tooltip_key = (title, subtitle)

        win_w, win_h = glfw.get_window_size(self.window)
        if win_w == 0 or win_h == 0:
            return
        tex_w, tex_h = self._tooltip_size
        x0 = screen_x / win_w * 2.0 - 1.0
        y1 = 1.0 - screen_y / win_h * 2.0
        x1 = x0 + tex_w / win_w * 2.0
        y0 = y1 - tex_h / win_h * 2.0
        quad = np.asarray([
            (x0, y0, 0.0, 0.0), (x1, y0, 1.0, 0.0), (x1, y1, 1.0, 1.0),
            (x0, y0, 0.0, 0.0), (x1, y1, 1.0, 1.0), (x0, y1, 0.0, 1.0),
        ], dtype=np.float32)
        if self._tooltip_vbo is None:
            self._tooltip_vbo = self.ctx.buffer(reserve=quad.nbytes, dynamic=True)
            self._tooltip_vao = self.ctx.vertex_array(
                self.overlay_prog,
                [(self._tooltip_vbo, "2f 2f", "in_position", "in_uv")],
            )
        self._tooltip_vbo.write(quad.tobytes())
        self.ctx.disable(moderngl.DEPTH_TEST)
        self._tooltip_texture.use(location=0)
        self._tooltip_vao.render(mode=moderngl.TRIANGLES, vertices=6)
        self.ctx.enable(moderngl.DEPTH_TEST)

    def _texture_from_image(self, image: Image.Image, *, mipmaps: bool = True) -> moderngl.Texture:
        flipped = image.convert("RGBA").transpose(Image.Transpose.FLIP_TOP_BOTTOM)
        texture = self.ctx.texture(flipped.size, 4, flipped.tobytes())
        texture.repeat_x = False
        texture.repeat_y = False
        if mipmaps:
            texture.filter = (moderngl.LINEAR_MIPMAP_LINEAR, moderngl.LINEAR)
            texture.build_mipmaps()
        else:
            texture.filter = (moderngl.LINEAR, moderngl.LINEAR)
        return texture

    # ---- input ----
    def _on_framebuffer_resize(self, _window: glfw._GLFWwindow, width: int, height: int) -> None:
        self._refresh_viewport(width, height)

    def _refresh_viewport(self, width: int, height: int) -> None:
        width = max(1, width)
        height = max(1, height)
        self.ctx.viewport = (0, 0, width, height)
        self._camera.set_aspect(width, height)

    def _on_mouse_button(self, window: glfw._GLFWwindow, button: int, action: int, _mods: int) -> None:
        if button != glfw.MOUSE_BUTTON_LEFT:
            return
        if action == glfw.PRESS:
            now = glfw.get_time()
            xpos, ypos = glfw.get_cursor_pos(window)
            if self._is_double_click(now, xpos, ypos):
                self._last_press = None
                width, height = glfw.get_window_size(window)
                self._scheduler.double_clicked(xpos, ypos, width, height)
            else:
                self._last_press = (now, xpos, ypos)
            self._drag_active = True
            self._last_cursor = (xpos, ypos)
        elif action == glfw.RELEASE:
            self._drag_active = False
            self._last_cursor = None

    def _is_double_click(self, now: float, xpos: float, ypos: float) -> bool:
        if self._last_press is None:
            return False
        last_time, last_x, last_y = self._last_press
        return (
            now - last_time <= self.cfg.double_click_interval
            and abs(xpos - last_x) <= DOUBLE_CLICK_SLOP_PX
            and abs(ypos - last_y) <= DOUBLE_CLICK_SLOP_PX
        )

    def _on_scroll(self, _window: glfw._GLFWwindow, _xoffset: float, yoffset: float) -> None:
        self._camera.zoom(yoffset * CAMERA_ZOOM_STEP)

    def _on_cursor_move(self, window: glfw._GLFWwindow, xpos: float, ypos: float) -> None:
        if self._drag_active and self._last_cursor is not None:
            last_x, last_y = self._last_cursor
            self._camera.orbit(-(xpos - last_x) * DRAG_SENSITIVITY, (ypos - last_y) * DRAG_SENSITIVITY)
        if self._drag_active:
            self._last_cursor = (xpos, ypos)
        width, height = glfw.get_window_size(window)
        self._scheduler.pointer_moved(xpos, ypos, width, height)

    # ---- teardown ----
    def _release_boundaries(self) -> None:
        if self._boundary_vao is not None:
            self._boundary_vao.release()
        if self._boundary_vbo is not None:
            self._boundary_vbo.release()
        self._boundary_vao = None
        self._boundary_vbo = None
        self._boundary_offsets = []

    def _release_marker_buffers(self) -> None:
        if self._marker_vao is not None:
            self._marker_vao.release()
        if self._marker_vbo is not None:
            self._marker_vbo.release()
        self._marker_vao = None
        self._marker_vbo = None

    def _cleanup(self) -> None:
        self._scheduler.exit_view()
        self._pending_frames.clear()
        self._loader.shutdown()
        self._controls.destroy()

        glfw.set_framebuffer_size_callback(self.window, None)
        glfw.set_cursor_pos_callback(self.window, None)
        glfw.set_mouse_button_callback(self.window, None)
        glfw.set_scroll_callback(self.window, None)

        self._release_boundaries()
        self._release_marker_buffers()
        for texture in list(self._icon_textures.values()) + list(self._portrait_textures.values()):
            texture.release()
        self._icon_textures.clear()
        self._portrait_textures.clear()
        if self._tooltip_texture is not None:
            self._tooltip_texture.release()
        for resource in (self._tooltip_vao, self._tooltip_vbo, self._grid_vao, self._grid_vbo,
                         self._star_vao, self._star_vbo):
            if resource is not None:
                resource.release()
        for prog in (self.line_prog, self.star_prog, self.sprite_prog, self.overlay_prog):
            prog.release()

        if self._hand_cursor is not None:
            glfw.destroy_cursor(self._hand_cursor)
        self.ctx.release()
        glfw.destroy_window(self.window)
        glfw.terminate()

    @staticmethod
    def _build_grid(radius: float, segments: int) -> np.ndarray:
        """Wireframe of the globe as LINES pairs: parallels plus meridians."""
        pieces: List[np.ndarray] = []
        ring_lons = np.linspace(-180.0, 180.0, segments * 4 + 1)
        for i in range(1, segments):
            lat = 90.0 - 180.0 * i / segments
            ring = project_array(np.full_like(ring_lons, lat), ring_lons, radius)
            pieces.append(np.repeat(ring, 2, axis=0)[1:-1])
        meridian_lats = np.linspace(90.0, -90.0, segments * 2 + 1)
        for j in range(segments):
            lon = -180.0 + 360.0 * j / segments
            meridian = project_array(meridian_lats, np.full_like(meridian_lats, lon), radius)
            pieces.append(np.repeat(meridian, 2, axis=0)[1:-1])
        return np.vstack(pieces).astype(np.float32)

    @staticmethod
    def _build_starfield(count: int, seed: Optional[int] = None) -> np.ndarray:
        rng = np.random.default_rng(seed)
        stars = np.empty((count, 3), dtype=np.float32)
        stars[:, 0] = rng.uniform(-1000.0, 1000.0, count)
        stars[:, 1] = rng.uniform(-1000.0, 1000.0, count)
        stars[:, 2] = rng.uniform(-2000.0, 0.0, count)
        return stars


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Interactive globe of animal sightings")
    parser.add_argument("--records", help="Path or URL of the animal records JSON list")
    parser.add_argument("--boundaries", help="Path or URL of a GeoJSON country boundary document")
    parser.add_argument("--no-download", action="store_true",
                        help="Do not download Natural Earth boundaries when no local copy exists")
    parser.add_argument("--log-level", default="INFO",
                        choices=("DEBUG", "INFO", "WARNING", "ERROR"), help="Logging verbosity")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = ViewerConfig(download_missing_boundaries=not args.no_download)
    if args.records:
        config.records_source = args.records if is_remote(args.records) else Path(args.records)
    if args.boundaries:
        config.boundary_source = args.boundaries
    viewer = GlobeViewer(config)
    viewer.run()


if __name__ == "__main__":
    main()
