#!/usr/bin/env python3
"""
Physics collaborator for the maze game, backed by pymunk
Registers colliders, steps the simulation and reports new contacts
"""

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import pymunk

logger = logging.getLogger('maze_game.physics')

# Density for bodies that are (or may become) dynamic
DEFAULT_DENSITY = 0.001


@dataclass(eq=False)
class Entity:
    """A collider registered with the world"""
    id: int
    tag: str
    kind: str  # 'rectangle' or 'circle'
    body: pymunk.Body
    shape: pymunk.Shape
    width: float = 0.0
    height: float = 0.0
    radius: float = 0.0
    style: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_static(self) -> bool:
        return self.body.body_type == pymunk.Body.STATIC

    @property
    def position(self) -> Tuple[float, float]:
        return (self.body.position.x, self.body.position.y)


CollisionListener = Callable[[List[Tuple[Entity, Entity]]], None]


class PymunkWorld:
    """2-D world in screen coordinates (y grows downwards)"""

    def __init__(self, damping: float = 1.0, gravity: float = 0.0,
                 friction: float = 0.1, elasticity: float = 0.0):
        self.space = pymunk.Space()
        self.space.gravity = (0.0, gravity)
        self.space.damping = damping
        self.friction = friction
        self.elasticity = elasticity

        self._ids = itertools.count(1)
        self._entities: Dict[int, Entity] = {}
        self._by_shape: Dict[pymunk.Shape, Entity] = {}
        self._listeners: List[CollisionListener] = []
        self._pending_pairs: List[Tuple[Entity, Entity]] = []
        self.steps = 0

        self.space.on_collision(begin=self._begin_contact)

    # --- Registration ---

    def _register(self, tag: str, kind: str, body: pymunk.Body, shape: pymunk.Shape,
                  style: Optional[Dict[str, Any]], **size) -> Entity:
        shape.friction = self.friction
        shape.elasticity = self.elasticity
        self.space.add(body, shape)

        entity = Entity(id=next(self._ids), tag=tag, kind=kind, body=body, shape=shape,
                        style=dict(style or {}), **size)
        self._entities[entity.id] = entity
        self._by_shape[shape] = entity
        return entity

    def add_static_rectangle(self, center_x: float, center_y: float, width: float, height: float,
                             tag: str, style: Optional[Dict[str, Any]] = None) -> Entity:
        body = pymunk.Body(body_type=pymunk.Body.STATIC)
        body.position = (center_x, center_y)
        shape = pymunk.Poly.create_box(body, (width, height))
        # Density lets the body pick up mass if it is made dynamic later
        shape.density = DEFAULT_DENSITY
        return self._register(tag, 'rectangle', body, shape, style, width=width, height=height)

    def add_dynamic_circle(self, center_x: float, center_y: float, radius: float,
                           tag: str, style: Optional[Dict[str, Any]] = None) -> Entity:
        body = pymunk.Body()
        body.position = (center_x, center_y)
        shape = pymunk.Circle(body, radius)
        shape.density = DEFAULT_DENSITY
        return self._register(tag, 'circle', body, shape, style, radius=radius)

    # --- Mutation ---

    def velocity(self, entity: Entity) -> Tuple[float, float]:
        return (entity.body.velocity.x, entity.body.velocity.y)

    def set_velocity(self, entity: Entity, velocity: Tuple[float, float]):
        entity.body.velocity = tuple(velocity)

    def set_static(self, entity: Entity, is_static: bool):
        """Switch a body between static and dynamic"""
        body_type = pymunk.Body.STATIC if is_static else pymunk.Body.DYNAMIC
        if entity.body.body_type != body_type:
            entity.body.body_type = body_type

    def set_gravity(self, gravity_y: float):
        logger.debug(f"Gravity set to {gravity_y}")
        self.space.gravity = (0.0, gravity_y)

    @property
    def gravity(self) -> float:
        return self.space.gravity.y

    # --- Queries ---

    def entities(self, tag: Optional[str] = None) -> List[Entity]:
        if tag is None:
            return list(self._entities.values())
        return [e for e in self._entities.values() if e.tag == tag]

    def get(self, entity_id: int) -> Entity:
        return self._entities[entity_id]

    def snapshot(self, entity: Entity) -> Dict[str, Any]:
        data = {
            'id': entity.id,
            'tag': entity.tag,
            'shape': entity.kind,
            'x': round(entity.body.position.x, 2),
            'y': round(entity.body.position.y, 2),
            'angle': round(entity.body.angle, 4),
            'static': entity.is_static,
            'style': entity.style,
        }
        if entity.kind == 'circle':
            data['radius'] = entity.radius
        else:
            data['width'] = entity.width
            data['height'] = entity.height
        return data

    # --- Simulation ---

    def on_collision_start(self, listener: CollisionListener):
        """Register a listener for batches of newly formed contacts"""
        self._listeners.append(listener)

    def _begin_contact(self, arbiter, space, data):
        shape_a, shape_b = arbiter.shapes
        entity_a = self._by_shape.get(shape_a)
        entity_b = self._by_shape.get(shape_b)
        if entity_a is not None and entity_b is not None:
            self._pending_pairs.append((entity_a, entity_b))

    def step(self, dt: float):
        """Advance one step, then notify listeners of contacts begun in it"""
        self.space.step(dt)
        self.steps += 1

        if not self._pending_pairs:
            return
        pairs, self._pending_pairs = self._pending_pairs, []
        for listener in self._listeners:
            listener(pairs)
