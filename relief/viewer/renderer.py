"""
Relief OpenGL Renderer

Handles OpenGL state, terrain buffer upload/release and drawing.
"""

import logging
import numpy as np
from typing import Optional

from relief.viewer.camera import Camera
from relief.viewer.mesh import Mesh
from relief.viewer.session import FrameUniforms
from relief.viewer.shaders import (
    create_shader_program,
    terrain_fragment_shader,
    TERRAIN_VERTEX_SHADER,
)

logger = logging.getLogger(__name__)


class Renderer:
    """
    OpenGL renderer for a single terrain surface.
    """

    def __init__(self):
        self.mesh: Optional[Mesh] = None
        self.shader_terrain = 0

        self.initialized = False
        self.background_color = (0.13, 0.14, 0.17, 1.0)

        # Directional light from the north-west, pointing down
        self.light_dir = np.array([1.0, -1.0, -2.0], dtype=np.float32)
        self.ambient = 0.35

    def initialize(self):
        """Initialize OpenGL state and shaders."""
        from OpenGL.GL import (
            glEnable, glClearColor,
            GL_DEPTH_TEST,
        )

        self.shader_terrain = create_shader_program(TERRAIN_VERTEX_SHADER, terrain_fragment_shader())

        glEnable(GL_DEPTH_TEST)
        glClearColor(*self.background_color)

        self.initialized = True

    def upload_mesh(self, mesh: Mesh):
        """Upload mesh data to GPU."""
        from OpenGL.GL import (
            glGenVertexArrays, glGenBuffers, glBindVertexArray,
            glBindBuffer, glBufferData, glVertexAttribPointer,
            glEnableVertexAttribArray,
            GL_ARRAY_BUFFER, GL_ELEMENT_ARRAY_BUFFER, GL_STATIC_DRAW, GL_FLOAT,
        )

        mesh.vao = glGenVertexArrays(1)
        glBindVertexArray(mesh.vao)

        vbos = []
        for location, (data, size) in enumerate(mesh.attribute_arrays()):
            data = np.ascontiguousarray(data, dtype=np.float32)
            vbo = glGenBuffers(1)
            glBindBuffer(GL_ARRAY_BUFFER, vbo)
            glBufferData(GL_ARRAY_BUFFER, data.nbytes, data, GL_STATIC_DRAW)
            glVertexAttribPointer(location, size, GL_FLOAT, False, 0, None)
            glEnableVertexAttribArray(location)
            vbos.append(int(vbo))
        mesh.vbos = tuple(vbos)

        indices = np.ascontiguousarray(mesh.indices, dtype=np.uint32)
        mesh.ebo = glGenBuffers(1)
        glBindBuffer(GL_ELEMENT_ARRAY_BUFFER, mesh.ebo)
        glBufferData(GL_ELEMENT_ARRAY_BUFFER, indices.nbytes, indices, GL_STATIC_DRAW)

        glBindVertexArray(0)

    def release_mesh(self, mesh: Mesh):
        """Free the GPU buffers of a mesh that is no longer displayed."""
        if not mesh.uploaded:
            return
        from OpenGL.GL import glDeleteBuffers, glDeleteVertexArrays

        glDeleteBuffers(len(mesh.vbos) + 1, list(mesh.vbos) + [mesh.ebo])
        glDeleteVertexArrays(1, [mesh.vao])
        mesh.vao = 0
        mesh.vbos = ()
        mesh.ebo = 0
        if self.mesh is mesh:
            self.mesh = None

    def set_mesh(self, mesh: Mesh):
        if self.mesh is mesh:
            return
        if self.mesh is not None:
            self.release_mesh(self.mesh)
        if not mesh.uploaded:
            self.upload_mesh(mesh)
        self.mesh = mesh
        logger.debug(f"Terrain mesh uploaded: {mesh.num_vertices} vertices, {mesh.num_indices // 3} triangles")

    def render(self, width: int, height: int, camera: Camera, uniforms: Optional[FrameUniforms]):
        """Render one frame; contour width comes in fresh with every call."""
        from OpenGL.GL import (
            glClear, glViewport, glUseProgram,
            glUniformMatrix4fv, glUniform3fv, glUniform1f,
            glGetUniformLocation, glBindVertexArray, glDrawElements,
            GL_COLOR_BUFFER_BIT, GL_DEPTH_BUFFER_BIT,
            GL_TRIANGLES, GL_UNSIGNED_INT,
        )

        if not self.initialized:
            self.initialize()

        glViewport(0, 0, width, height)
        glClear(GL_COLOR_BUFFER_BIT | GL_DEPTH_BUFFER_BIT)

        if self.mesh is None or uniforms is None:
            return

        camera.aspect = width / height if height > 0 else 1.0
        prog = self.shader_terrain

        glUseProgram(prog)
        glUniformMatrix4fv(glGetUniformLocation(prog, "view"), 1, True, camera.get_view_matrix())
        glUniformMatrix4fv(glGetUniformLocation(prog, "projection"), 1, True, camera.get_projection_matrix())
        glUniform3fv(glGetUniformLocation(prog, "viewPos"), 1, camera.position.astype(np.float32))
        glUniform3fv(glGetUniformLocation(prog, "lightDir"), 1, self.light_dir)
        glUniform1f(glGetUniformLocation(prog, "ambient"), self.ambient)
        glUniform1f(glGetUniformLocation(prog, "minHeight"), uniforms.min_height)
        glUniform1f(glGetUniformLocation(prog, "maxHeight"), uniforms.max_height)
        glUniform1f(glGetUniformLocation(prog, "contourInterval"), uniforms.contour_interval)
        glUniform1f(glGetUniformLocation(prog, "contourWidth"), uniforms.contour_width)

        glBindVertexArray(self.mesh.vao)
        glDrawElements(GL_TRIANGLES, self.mesh.num_indices, GL_UNSIGNED_INT, None)
        glBindVertexArray(0)

    def resize(self, width: int, height: int, camera: Camera):
        camera.aspect = width / height if height > 0 else 1.0
