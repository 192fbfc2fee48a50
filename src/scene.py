"""
Scene state: objects, lights and camera feeding the hatching engine.

Objects are authored as primitives (box, sphere) or mesh files and are
tessellated with trimesh into world-space Mesh values. The Scene keeps an
explicit dirty flag; callers mutate it and then pull fresh hatching with
``recompute()``.
"""
import json
import logging
import os
import uuid
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import trimesh

from hatch_generator import HatchConfig, generate_hatch_lines
from scene_types import (
    Camera,
    DirectionalLight,
    GeometryRole,
    HatchPath,
    Light,
    Mesh,
    Spotlight,
)

logger = logging.getLogger(__name__)

OBJECT_KINDS = ("box", "sphere", "mesh")


class SceneFileError(ValueError):
    """A scene file could not be parsed into a Scene."""
    pass


@dataclass
class SceneObject:
    """An authored object: a primitive or a mesh file plus its transform."""
    kind: str = "box"
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    rotation_deg: Tuple[float, float, float] = (0.0, 0.0, 0.0)   # Euler XYZ
    scale: Tuple[float, float, float] = (1.0, 1.0, 1.0)
    geometry_params: Dict[str, float] = field(default_factory=dict)
    mesh_path: Optional[str] = None
    role: GeometryRole = GeometryRole.SUBJECT
    name: str = "object"


def object_transform(obj: SceneObject) -> np.ndarray:
    """4x4 object-to-world matrix: scale, then rotate XYZ, then translate."""
    rx, ry, rz = np.radians(obj.rotation_deg)
    rotation = trimesh.transformations.euler_matrix(rx, ry, rz, axes="rxyz")
    scale = np.diag([obj.scale[0], obj.scale[1], obj.scale[2], 1.0])
    translation = trimesh.transformations.translation_matrix(obj.position)
    return translation @ rotation @ scale


def build_mesh(obj: SceneObject) -> Mesh:
    """Tessellate *obj* and bake its transform into world-space triangles."""
    params = obj.geometry_params
    if obj.kind == "box":
        tm = trimesh.creation.box(extents=[
            params.get("width", 1.0),
            params.get("height", 1.0),
            params.get("depth", 1.0),
        ])
    elif obj.kind == "sphere":
        tm = trimesh.creation.uv_sphere(
            radius=params.get("radius", 0.5),
            count=[int(params.get("height_segments", 16)),
                   int(params.get("width_segments", 32))],
        )
    elif obj.kind == "mesh":
        if not obj.mesh_path or not os.path.isfile(obj.mesh_path):
            raise FileNotFoundError(f"Mesh file not found: {obj.mesh_path}")
        tm = trimesh.load(obj.mesh_path, force="mesh")
    else:
        raise ValueError(f"Unknown object kind: {obj.kind!r}")

    tm = tm.copy()
    tm.apply_transform(object_transform(obj))
    return Mesh.from_trimesh(tm, role=obj.role, name=obj.name)


class Scene:
    """Mutable scene model with an explicit recompute-needed flag."""

    def __init__(
        self,
        lights: Optional[List[Light]] = None,
        objects: Optional[List[SceneObject]] = None,
        camera: Optional[Camera] = None,
        hatch_config: Optional[HatchConfig] = None,
    ):
        self.lights: Dict[str, Light] = {}
        self.objects: Dict[str, SceneObject] = {}
        self.camera = camera if camera is not None else Camera()
        self.hatch_config = hatch_config
        self.hatch_paths: List[HatchPath] = []
        self.is_dirty = True
        for light in lights or []:
            self.add_light(light)
        for obj in objects or []:
            self.add_object(obj)

    @classmethod
    def default(cls) -> "Scene":
        """Unit box, small sphere and one 45-degree directional light."""
        return cls(
            lights=[DirectionalLight(
                position=(3.0, 5.0, 4.0),
                target=(0.0, 0.0, 0.0),
                hatch_angle_deg=45.0,
                intensity=0.8,
                name="key",
            )],
            objects=[
                SceneObject(kind="box", name="box",
                            geometry_params={"width": 1.0, "height": 1.0, "depth": 1.0}),
                SceneObject(kind="sphere", name="sphere", position=(2.0, 0.5, -1.0),
                            geometry_params={"radius": 0.5}),
            ],
        )

    # ── lights ──

    def add_light(self, light: Light, light_id: Optional[str] = None) -> str:
        light_id = light_id or str(uuid.uuid4())
        self.lights[light_id] = light
        self.is_dirty = True
        return light_id

    def update_light(self, light_id: str, **changes) -> Light:
        light = replace(self.lights[light_id], **changes)
        self.lights[light_id] = light
        self.is_dirty = True
        return light

    def remove_light(self, light_id: str) -> None:
        del self.lights[light_id]
        self.is_dirty = True

    # ── objects ──

    def add_object(self, obj: SceneObject, object_id: Optional[str] = None) -> str:
        object_id = object_id or str(uuid.uuid4())
        self.objects[object_id] = obj
        self.is_dirty = True
        return object_id

    def update_object(self, object_id: str, **changes) -> SceneObject:
        obj = replace(self.objects[object_id], **changes)
        self.objects[object_id] = obj
        self.is_dirty = True
        return obj

    def remove_object(self, object_id: str) -> None:
        del self.objects[object_id]
        self.is_dirty = True

    def update_camera(self, **changes) -> Camera:
        self.camera = replace(self.camera, **changes)
        self.is_dirty = True
        return self.camera

    # ── hatching ──

    def meshes(self) -> List[Mesh]:
        return [build_mesh(obj) for obj in self.objects.values()]

    def recompute(self) -> List[HatchPath]:
        """Regenerate hatching if anything changed since the last call."""
        if self.is_dirty:
            self.hatch_paths = generate_hatch_lines(
                self.meshes(),
                list(self.lights.values()),
                self.camera,
                self.hatch_config,
            )
            self.is_dirty = False
        return self.hatch_paths


# ─── JSON scene files ────────────────────────────────────────────────────────

def _vec(value: Any, key: str) -> Tuple[float, float, float]:
    try:
        x, y, z = (float(v) for v in value)
    except (TypeError, ValueError) as exc:
        raise SceneFileError(f"{key} must be a list of three numbers, got {value!r}") from exc
    return (x, y, z)


def _float(value: Any, key: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise SceneFileError(f"{key} must be a number, got {value!r}") from exc


def _require_mapping(value: Any, key: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise SceneFileError(f"{key} must be a JSON object, got {value!r}")
    return value


def _parse_light(data: Dict[str, Any]) -> Optional[Light]:
    light_type = data.get("type", "directional")
    common = dict(
        position=_vec(data.get("position", (0.0, 5.0, 0.0)), "light.position"),
        target=_vec(data.get("target", (0.0, 0.0, 0.0)), "light.target"),
        hatch_angle_deg=_float(data.get("hatch_angle_deg", 0.0), "light.hatch_angle_deg"),
        intensity=_float(data.get("intensity", 1.0), "light.intensity"),
        name=str(data.get("name", light_type)),
    )
    if light_type == "directional":
        return DirectionalLight(**common)
    if light_type == "spotlight":
        return Spotlight(
            cone_half_angle_deg=_float(
                data.get("cone_half_angle_deg", 30.0), "light.cone_half_angle_deg"
            ),
            **common,
        )
    logger.warning("Skipping unsupported light type %r", light_type)
    return None


def _parse_object(data: Dict[str, Any], base_dir: str) -> SceneObject:
    kind = data.get("kind", "box")
    if kind not in OBJECT_KINDS:
        raise SceneFileError(f"Unknown object kind {kind!r}; expected one of {OBJECT_KINDS}")
    mesh_path = data.get("path")
    if mesh_path is not None and not os.path.isabs(mesh_path):
        mesh_path = os.path.join(base_dir, mesh_path)
    try:
        role = GeometryRole(data.get("role", "subject"))
    except ValueError as exc:
        raise SceneFileError(f"Unknown geometry role {data.get('role')!r}") from exc
    params = _require_mapping(data.get("params", {}), "object.params")
    return SceneObject(
        kind=kind,
        position=_vec(data.get("position", (0.0, 0.0, 0.0)), "object.position"),
        rotation_deg=_vec(data.get("rotation_deg", (0.0, 0.0, 0.0)), "object.rotation_deg"),
        scale=_vec(data.get("scale", (1.0, 1.0, 1.0)), "object.scale"),
        geometry_params={k: _float(v, f"object.params.{k}") for k, v in params.items()},
        mesh_path=mesh_path,
        role=role,
        name=str(data.get("name", kind)),
    )


def _entries(data: Dict[str, Any], key: str) -> List[Any]:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise SceneFileError(f"{key} must be a list, got {value!r}")
    return value


def scene_from_dict(data: Dict[str, Any], base_dir: str = ".") -> Scene:
    """Build a Scene from the JSON scene-file structure."""
    if not isinstance(data, dict):
        raise SceneFileError("Scene file must contain a JSON object")

    camera_data = _require_mapping(data.get("camera", {}), "camera")
    camera = Camera()
    if camera_data:
        camera = Camera(
            position=_vec(camera_data.get("position", camera.position), "camera.position"),
            look_at=_vec(camera_data.get("look_at", camera.look_at), "camera.look_at"),
            fov_deg=_float(camera_data.get("fov_deg", camera.fov_deg), "camera.fov_deg"),
            near=_float(camera_data.get("near", camera.near), "camera.near"),
            far=_float(camera_data.get("far", camera.far), "camera.far"),
            aspect=_float(camera_data.get("aspect", camera.aspect), "camera.aspect"),
        )

    scene = Scene(camera=camera)
    for entry in _entries(data, "lights"):
        entry = _require_mapping(entry, "light")
        try:
            light = _parse_light(entry)
        except SceneFileError:
            raise
        except ValueError as exc:
            raise SceneFileError(f"Invalid light {entry!r}: {exc}") from exc
        if light is not None:
            scene.add_light(light, _entry_id(entry))

    for entry in _entries(data, "objects"):
        entry = _require_mapping(entry, "object")
        scene.add_object(_parse_object(entry, base_dir), _entry_id(entry))
    return scene


def _entry_id(entry: Dict[str, Any]) -> Optional[str]:
    value = entry.get("id")
    return str(value) if value is not None else None


def load_scene(path: str) -> Scene:
    """Load a JSON scene file; relative mesh paths resolve against its folder."""
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Scene file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise SceneFileError(f"Scene file is not valid JSON: {exc}") from exc
    scene = scene_from_dict(data, base_dir=os.path.dirname(os.path.abspath(path)))
    logger.info(
        "Loaded scene %s: %d objects, %d lights",
        path, len(scene.objects), len(scene.lights),
    )
    return scene


def scene_to_dict(scene: Scene) -> Dict[str, Any]:
    """JSON-serializable form of *scene*, readable by ``scene_from_dict``."""
    lights = []
    for light_id, light in scene.lights.items():
        entry = asdict(light)
        entry["type"] = "spotlight" if isinstance(light, Spotlight) else "directional"
        entry["id"] = light_id
        lights.append(entry)

    objects = []
    for object_id, obj in scene.objects.items():
        entry = {
            "id": object_id,
            "kind": obj.kind,
            "name": obj.name,
            "position": list(obj.position),
            "rotation_deg": list(obj.rotation_deg),
            "scale": list(obj.scale),
            "params": dict(obj.geometry_params),
            "role": obj.role.value,
        }
        if obj.mesh_path is not None:
            entry["path"] = obj.mesh_path
        objects.append(entry)

    camera = asdict(scene.camera)
    camera.pop("up", None)
    return {"camera": camera, "lights": lights, "objects": objects}
