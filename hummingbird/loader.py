"""
YAML data loader with schema validation.

Loads the flower area scene tree and the run configuration from YAML
files and validates them against JSON schemas.
"""

import yaml
import json
from pathlib import Path
from typing import Optional
import jsonschema

from .data_types import (
    Scene, SceneNode, FlowerDefinition, SphereObstacle,
    RunConfig, AgentConfig, TrainingConfig, SimulationConfig
)
from .errors import HummingbirdError


class DataLoadError(HummingbirdError):
    """Raised when data loading or validation fails"""
    pass


def load_yaml(file_path: Path) -> dict:
    """Load YAML file and return parsed dict"""
    file_path = Path(file_path)
    if not file_path.exists():
        raise DataLoadError(f"File not found: {file_path}")

    try:
        with open(file_path, 'r') as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise DataLoadError(f"YAML parse error in {file_path}: {e}")


def validate_against_schema(data: dict, schema_path: Path, data_path: Path):
    """Validate data dict against JSON schema"""
    if not schema_path.exists():
        # Schemas are optional; data packs without them load unvalidated
        return

    try:
        with open(schema_path, 'r') as f:
            schema = json.load(f)
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        raise DataLoadError(f"Validation error in {data_path}: {e.message}")
    except json.JSONDecodeError as e:
        raise DataLoadError(f"Invalid JSON schema {schema_path}: {e}")


def parse_scene_node(data: dict) -> SceneNode:
    """Parse a scene node and its children recursively"""
    flower = None
    if 'flower' in data:
        flower = FlowerDefinition(**data['flower'])

    return SceneNode(
        node_id=data['id'],
        tag=data.get('tag'),
        position=data.get('position', [0.0, 0.0, 0.0]),
        flower=flower,
        children=[parse_scene_node(child) for child in data.get('children', [])]
    )


def parse_scene(data: dict) -> Scene:
    """Parse a scene dict (already loaded from YAML)"""
    return Scene(
        area_id=data['area_id'],
        origin=data.get('origin', [0.0, 0.0, 0.0]),
        root=parse_scene_node(data['root']),
        obstacles=[SphereObstacle(**o) for o in data.get('obstacles', [])],
        description=data.get('description')
    )


def load_scene(file_path: Path, schema_dir: Optional[Path] = None) -> Scene:
    """Load flower area scene from YAML"""
    data = load_yaml(file_path)

    if schema_dir:
        schema_path = Path(schema_dir) / "scene.schema.json"
        validate_against_schema(data, schema_path, file_path)

    try:
        return parse_scene(data)
    except (KeyError, TypeError) as e:
        raise DataLoadError(f"Malformed scene in {file_path}: {e}")


def load_config(file_path: Path, schema_dir: Optional[Path] = None) -> RunConfig:
    """Load run configuration from YAML"""
    data = load_yaml(file_path) or {}

    if schema_dir:
        schema_path = Path(schema_dir) / "config.schema.json"
        validate_against_schema(data, schema_path, file_path)

    try:
        return RunConfig(
            agent=AgentConfig(**data.get('agent', {})),
            training=TrainingConfig(**data.get('training', {})),
            simulation=SimulationConfig(**data.get('simulation', {}))
        )
    except TypeError as e:
        raise DataLoadError(f"Malformed config in {file_path}: {e}")


def load_all_data(data_root: Path, schema_dir: Optional[Path] = None,
                  scene_name: str = "flower_area", config_name: str = "training") -> dict:
    """Load scene and run configuration from a data directory

    Returns dict with keys: scene, config
    """
    data_root = Path(data_root)

    scene = load_scene(data_root / "scenes" / f"{scene_name}.yaml", schema_dir)
    config = load_config(data_root / "config" / f"{config_name}.yaml", schema_dir)

    return {
        'scene': scene,
        'config': config
    }
