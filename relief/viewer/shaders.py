"""
Relief GLSL Shaders

Terrain shader: Phong lighting over height bands with view-scaled contour lines.
The banding palette is generated from relief.viz.contours so the GPU and the
numpy/matplotlib paths stay identical.
"""

from relief.viz.contours import BAND_STOPS, BAND_THRESHOLDS, CONTOUR_LINE_COLOR, NULL_COLOR


TERRAIN_VERTEX_SHADER = """
#version 330 core

layout(location = 0) in vec3 position;
layout(location = 1) in vec3 normal;
layout(location = 2) in float height;
layout(location = 3) in float valid;

uniform mat4 view;
uniform mat4 projection;

out vec3 fragPos;
out vec3 fragNormal;
out float fragHeight;
out float fragValid;

void main() {
    fragPos = position;
    fragNormal = normal;
    fragHeight = height;
    fragValid = valid;
    gl_Position = projection * view * vec4(position, 1.0);
}
"""

_TERRAIN_FRAGMENT_TEMPLATE = """
#version 330 core

in vec3 fragPos;
in vec3 fragNormal;
in float fragHeight;
in float fragValid;

uniform vec3 viewPos;
uniform vec3 lightDir;
uniform float ambient;

uniform float minHeight;
uniform float maxHeight;
uniform float contourInterval;
uniform float contourWidth;

const float thresholds[{n_stops}] = float[]({thresholds});
const vec3 stops[{n_stops}] = vec3[]({stops});
const vec3 contourColor = {contour_color};
const vec3 nullColor = {null_color};

out vec4 outColor;

vec3 bandFill(float t) {{
    t = clamp(t, 0.0, 1.0);
    for (int k = 0; k < {n_bands}; ++k) {{
        if (t <= thresholds[k + 1] || k == {n_bands} - 1) {{
            float u = (t - thresholds[k]) / (thresholds[k + 1] - thresholds[k]);
            return mix(stops[k], stops[k + 1], u);
        }}
    }}
    return stops[{n_bands}];
}}

vec3 bandColor(float h) {{
    if (contourInterval > 0.0) {{
        float m = mod(h, contourInterval);
        if (m < contourWidth || m > contourInterval - contourWidth) {{
            return contourColor;
        }}
    }}
    float range = maxHeight - minHeight;
    return bandFill(range > 0.0 ? (h - minHeight) / range : 0.0);
}}

void main() {{
    vec3 base = fragValid > 0.5 ? bandColor(fragHeight) : nullColor;

    vec3 norm = normalize(fragNormal);
    vec3 l = normalize(-lightDir);
    float diff = max(dot(norm, l), 0.0);

    vec3 viewDir = normalize(viewPos - fragPos);
    vec3 reflectDir = reflect(-l, norm);
    float spec = pow(max(dot(viewDir, reflectDir), 0.0), 24.0);

    vec3 result = (ambient + (1.0 - ambient) * diff) * base + 0.15 * spec;
    outColor = vec4(result, 1.0);
}}
"""


def _vec3(rgb) -> str:
    return "vec3({:.6f}, {:.6f}, {:.6f})".format(*rgb)


def terrain_fragment_shader() -> str:
    return _TERRAIN_FRAGMENT_TEMPLATE.format(
        n_stops=len(BAND_STOPS),
        n_bands=len(BAND_STOPS) - 1,
        thresholds=", ".join(f"{t:.6f}" for t in BAND_THRESHOLDS),
        stops=", ".join(_vec3(s) for s in BAND_STOPS),
        contour_color=_vec3(CONTOUR_LINE_COLOR),
        null_color=_vec3(NULL_COLOR),
    )


def compile_shader(shader_type, source):
    """Compile a GLSL shader."""
    from OpenGL.GL import (
        glCreateShader, glShaderSource, glCompileShader,
        glGetShaderiv, glGetShaderInfoLog,
        GL_COMPILE_STATUS
    )

    shader = glCreateShader(shader_type)
    glShaderSource(shader, source)
    glCompileShader(shader)

    if not glGetShaderiv(shader, GL_COMPILE_STATUS):
        error = glGetShaderInfoLog(shader).decode()
        raise RuntimeError(f"Shader compilation error: {error}")

    return shader


def create_shader_program(vertex_source, fragment_source):
    """Create a shader program from vertex and fragment sources."""
    from OpenGL.GL import (
        glCreateProgram, glAttachShader, glLinkProgram,
        glGetProgramiv, glGetProgramInfoLog, glDeleteShader,
        GL_VERTEX_SHADER, GL_FRAGMENT_SHADER, GL_LINK_STATUS
    )

    vertex_shader = compile_shader(GL_VERTEX_SHADER, vertex_source)
    fragment_shader = compile_shader(GL_FRAGMENT_SHADER, fragment_source)

    program = glCreateProgram()
    glAttachShader(program, vertex_shader)
    glAttachShader(program, fragment_shader)
    glLinkProgram(program)

    if not glGetProgramiv(program, GL_LINK_STATUS):
        error = glGetProgramInfoLog(program).decode()
        raise RuntimeError(f"Shader linking error: {error}")

    glDeleteShader(vertex_shader)
    glDeleteShader(fragment_shader)

    return program
