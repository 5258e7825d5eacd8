WIDTH = 1280
HEIGHT = 720
FULLSCREEN = False
FPS = 60
VSYNC = True
FOV = 75
NEAR = 0.1
FAR = 100.0
BACKGROUND = (0.0, 0.0, 0.0, 1.0)
CAMERA_START = (10.0, 10.0, 15.0)
CAMERA_TARGET = (0.0, 0.0, 0.0)
# Largest frame delta fed to the loop (seconds); longer stalls are clamped
MAX_FRAME_DT = 0.1
LOG_LEVEL = "INFO"

# Lights
AMBIENT_COLOR = (1.0, 1.0, 1.0)
AMBIENT_INTENSITY = 0.05
MOON_COLOR = (0x88 / 255.0, 0xAA / 255.0, 1.0)
MOON_INTENSITY = 0.2
MOON_POSITION = (10.0, 20.0, -10.0)

# Ground
GROUND_SIZE = 50.0
GROUND_COLOR = (0.0, 0x33 / 255.0, 0.0)

# Physics
GRAVITY = (0.0, -9.82, 0.0)
SUBSTEPS = 10
FIXED_TIMESTEP = 1.0 / 60.0
MAX_SUBSTEPS = 10
MESH_COUNT = 12

# Fireflies
PARTICLE_COUNT = 100
PARTICLE_COLOR = (0.0, 1.0, 0.0)
PARTICLE_SPREAD = 25.0
PARTICLE_FLOOR = -25.0
PARTICLE_RESET_RANGE = (25.0, 50.0)
# Fixed per-tick decrement used when particles carry no speed of their own
PARTICLE_STEP = 0.1

# Picking
HIGHLIGHT_COLOR = (1.0, 0.85, 0.2)
HIGHLIGHT_SCALE = 1.2
CLICK_IMPULSE = 4.0

# Scroll camera (raw pixel mapping: z = base + scrollY * scale)
SCROLL_BASE_Z = 15.0
SCROLL_SCALE = 0.01
SCROLL_PIXELS_PER_WHEEL = 60
# Virtual document height; scroll range is CONTENT_HEIGHT - HEIGHT
CONTENT_HEIGHT = 3 * HEIGHT

# Orbit controls
ORBIT_DAMPING = 0.25
ORBIT_SENSITIVITY = 0.005
