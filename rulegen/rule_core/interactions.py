"""
Interaction Synthesizer
=======================

Builds the InteractionSet of a generated game in eight category passes:

1. resources     5. portals
2. immovables    6. movables
3. NPCs          7. walls
4. spawners      8. avatar

Passes run in this order and share one ClassificationContext; later passes
read the harmful / fleeing / collectible sets filled by earlier ones. The
random source is consumed in pass order, so a seed reproduces the rules.
"""

from __future__ import annotations

import logging
import random
from typing import Dict, Optional

from rulegen.rule_core.classification import ClassificationContext
from rulegen.rule_core.config_loader import GeneratorConfig, get_config
from rulegen.rule_core.critical import select_critical_entities
from rulegen.rule_core.level_analyzer import LevelAnalyzer
from rulegen.rule_core.roles import RoleAssignment
from rulegen.rule_core.rules import Effect
from rulegen.rule_core.sprite_catalog import SpriteDescriptor

logger = logging.getLogger(__name__)


class InteractionSynthesizer:
    """
    Emits interactions for every sprite category of a level.

    The sprite lists are fixed at construction; all per-call state lives in
    the context passed to :meth:`synthesize`.
    """

    def __init__(
        self,
        analyzer: LevelAnalyzer,
        roles: RoleAssignment,
        config: Optional[GeneratorConfig] = None
    ):
        """
        Initialize the synthesizer.

        Args:
            analyzer: Level inventory.
            roles: Wall / score / spike / exit assignment.
            config: Generator configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._prob = config.probabilities
        self._analyzer = analyzer
        self._roles = roles

        self._avatars = analyzer.avatars(live_only=False)
        self._resources = analyzer.resources(live_only=True)
        self._movables = analyzer.movables(live_only=False)
        self._npcs = analyzer.npcs(live_only=False)
        self._spawners = analyzer.spawners(live_only=False)
        self._portals = analyzer.portals(live_only=True)

    def synthesize(self, context: ClassificationContext, rng: random.Random) -> None:
        """
        Run all passes in order, appending to ``context``.

        Args:
            context: Fresh per-call accumulators.
            rng: Random source.
        """
        self.resource_pass(context)
        self.immovable_pass(context, rng)
        self.npc_pass(context, rng)
        self.spawner_pass(context, rng)
        self.portal_pass(context)
        self.movable_pass(context, rng)
        self.wall_pass(context, rng)
        self.avatar_pass(context, rng)
        logger.debug(
            "Synthesized %d interactions (harmful=%s harmful_npcs=%s fleeing=%s collectibles=%s)",
            len(context.interactions),
            context.harmful_objects,
            context.harmful_npcs,
            context.fleeing_npcs,
            context.collectibles,
        )

    # ------------------------------------------------------------------
    # 1. Resources
    # ------------------------------------------------------------------

    def resource_pass(self, context: ClassificationContext) -> None:
        """Avatars pick up every resource."""
        for avatar in self._avatars:
            for resource in self._resources:
                context.add(resource.name, avatar.name, Effect.COLLECT_RESOURCE)

    # ------------------------------------------------------------------
    # 2. Immovables
    # ------------------------------------------------------------------

    def immovable_pass(self, context: ClassificationContext, rng: random.Random) -> None:
        """The score sprite is a coin; the spike either kills or is a rare coin."""
        score = self._roles.score
        spike = self._roles.spike

        if score is not None:
            context.mark_collectible(score.name)
            for avatar in self._avatars:
                context.kill(score.name, avatar.name, score_change=1)

        if spike is None or (score is not None and spike.name == score.name):
            return

        if rng.random() < self._prob.spike:
            context.mark_harmful(spike.name)
            for avatar in self._avatars:
                context.kill(avatar.name, spike.name)
        else:
            context.mark_collectible(spike.name)
            for avatar in self._avatars:
                context.kill(spike.name, avatar.name, score_change=2)

    # ------------------------------------------------------------------
    # 3. NPCs
    # ------------------------------------------------------------------

    def npc_pass(self, context: ClassificationContext, rng: random.Random) -> None:
        """Dispatch every NPC on its subtype family."""
        subtypes = self._config.subtypes
        for npc in self._npcs:
            if npc.has_subtype(subtypes.fleeing):
                self._fleeing_npc(context, npc)
            elif npc.has_subtype(subtypes.bomber):
                self._bomber_npc(context, rng, npc)
            elif npc.has_subtype(subtypes.chaser):
                self._chaser_npc(context, rng, npc)
            elif npc.has_subtype(subtypes.random):
                self._random_npc(context, rng, npc)
            else:
                logger.debug("NPC %s has unhandled subtype '%s'", npc.name, npc.subtype)

    def _fleeing_npc(self, context: ClassificationContext, npc: SpriteDescriptor) -> None:
        # Caught on contact with whatever it flees from
        context.mark_fleeing(npc.name)
        context.mark_collectible(npc.name)
        chasers = npc.children or tuple(a.name for a in self._avatars)
        for chaser in chasers:
            context.kill(npc.name, chaser, score_change=1)

    def _bomber_npc(
        self,
        context: ClassificationContext,
        rng: random.Random,
        npc: SpriteDescriptor
    ) -> None:
        context.mark_harmful_npc(npc.name)
        for avatar in self._avatars:
            context.kill(avatar.name, npc.name)

        if rng.random() < self._prob.bomber:
            for child in npc.children:
                context.mark_harmful(child)
                for avatar in self._avatars:
                    context.kill(avatar.name, child)
        else:
            for child in npc.children:
                context.mark_collectible(child)
                for avatar in self._avatars:
                    context.kill(child, avatar.name, score_change=1)

    def _chaser_npc(
        self,
        context: ClassificationContext,
        rng: random.Random,
        npc: SpriteDescriptor
    ) -> None:
        hunts_avatar = False
        for child in npc.children:
            if self._analyzer.is_avatar(child):
                if not hunts_avatar:
                    hunts_avatar = True
                    context.mark_harmful_npc(npc.name)
                    for avatar in self._avatars:
                        context.kill(avatar.name, npc.name)
            elif rng.random() < self._prob.double_npc:
                context.kill(child, npc.name)
            else:
                context.add(child, npc.name, Effect.TRANSFORM_TO, stype=npc.name)

    def _random_npc(
        self,
        context: ClassificationContext,
        rng: random.Random,
        npc: SpriteDescriptor
    ) -> None:
        if rng.random() < self._prob.random_npc:
            context.mark_harmful_npc(npc.name)
            for avatar in self._avatars:
                context.kill(avatar.name, npc.name)
        else:
            context.mark_collectible(npc.name)
            for avatar in self._avatars:
                context.kill(npc.name, avatar.name, score_change=1)

    # ------------------------------------------------------------------
    # 4. Spawners
    # ------------------------------------------------------------------

    def spawner_pass(self, context: ClassificationContext, rng: random.Random) -> None:
        """Spawned sprites are all harmful or all coins; spawners inherit that."""
        if rng.random() < self._prob.spawned:
            for spawner in self._spawners:
                for child in spawner.children:
                    context.mark_harmful(child)
            for avatar in self._avatars:
                for spawner in self._spawners:
                    for child in spawner.children:
                        context.kill(avatar.name, child)
        else:
            for spawner in self._spawners:
                for child in spawner.children:
                    if child not in context.harmful_objects:
                        context.mark_collectible(child)
            for avatar in self._avatars:
                for spawner in self._spawners:
                    for child in spawner.children:
                        if child not in context.harmful_objects:
                            context.kill(child, avatar.name, score_change=1)

        if rng.random() < self._prob.kill_resource:
            for resource in self._resources:
                for spawner in self._spawners:
                    for child in spawner.children:
                        context.kill(resource.name, child)

        for spawner in self._spawners:
            if any(child in context.harmful_objects for child in spawner.children):
                context.mark_harmful(spawner.name)
        for spawner in self._spawners:
            if any(child in context.collectibles for child in spawner.children):
                context.mark_collectible(spawner.name)

    # ------------------------------------------------------------------
    # 5. Portals
    # ------------------------------------------------------------------

    def portal_pass(self, context: ClassificationContext) -> None:
        """Exits vanish when the avatar enters them; teleporters move it to the exit."""
        for avatar in self._avatars:
            for exit_sprite in self._roles.exits:
                context.kill(exit_sprite.name, avatar.name)

        for portal in self._portals:
            if not portal.has_subtype(self._config.subtypes.teleport):
                continue
            for avatar in self._avatars:
                context.add(avatar.name, portal.name, Effect.TELEPORT_TO_EXIT)

    # ------------------------------------------------------------------
    # 6. Movables
    # ------------------------------------------------------------------

    def movable_pass(self, context: ClassificationContext, rng: random.Random) -> None:
        """Free movables are harmful, collectible, or dragged along by the avatar."""
        owned = self._analyzer.avatar_owned | self._analyzer.spawner_owned
        for movable in self._movables:
            if movable.name in owned:
                continue

            draw = rng.random()
            if draw < self._prob.harmful_movable:
                context.mark_harmful(movable.name)
                for avatar in self._avatars:
                    context.kill(avatar.name, movable.name)
            elif draw > self._prob.useful_movable:
                context.mark_collectible(movable.name)
                for avatar in self._avatars:
                    context.kill(movable.name, avatar.name, score_change=1)
            else:
                for avatar in self._avatars:
                    context.add(avatar.name, movable.name, Effect.PULL_WITH_IT)

    # ------------------------------------------------------------------
    # 7. Walls
    # ------------------------------------------------------------------

    def wall_pass(self, context: ClassificationContext, rng: random.Random) -> None:
        """Screen edge and wall behavior for avatars, movables and NPCs."""
        wall = self._roles.wall
        avatar_fire_wall = rng.random() < self._prob.firewall and wall is not None

        critical_resource: Optional[str] = None
        if self._resources:
            critical_resource = rng.choice(self._resources).name

        avatar_effect = Effect.STEP_BACK
        avatar_params: Dict[str, object] = {}
        if avatar_fire_wall:
            if rng.random() > self._prob.kill_if_has_less:
                avatar_effect = Effect.KILL_SPRITE
            elif critical_resource is not None:
                avatar_effect = Effect.KILL_IF_HAS_LESS
                avatar_params = {
                    "resource": critical_resource,
                    "limit": self._analyzer.count(critical_resource) // 2 + 1,
                }

        for avatar in self._avatars:
            context.at_edge(avatar.name, Effect.STEP_BACK)
            if wall is None:
                continue
            context.add(avatar.name, wall.name, avatar_effect, **avatar_params)
            if not avatar_fire_wall and rng.random() < self._prob.destroy_wall:
                for projectile in avatar.children:
                    context.kill(projectile, wall.name)
                    context.kill(wall.name, projectile)

        npc_fire_wall = (
            rng.random() < self._prob.firewall
            and wall is not None
            and not context.fleeing_npcs
        )
        action = rng.choice(self._config.wall_actions)
        if npc_fire_wall:
            action = Effect.KILL_SPRITE

        for movable in self._movables:
            context.at_edge(movable.name, action)
            if wall is None:
                continue
            if rng.random() < self._prob.destroy_wall:
                context.kill(wall.name, movable.name)
                context.kill(movable.name, wall.name)
            else:
                context.add(movable.name, wall.name, action)

        for npc in self._npcs:
            context.at_edge(npc.name, action)
            if wall is not None:
                context.add(npc.name, wall.name, action)

    # ------------------------------------------------------------------
    # 8. Avatar
    # ------------------------------------------------------------------

    def avatar_pass(self, context: ClassificationContext, rng: random.Random) -> None:
        """Pick the critical entities, then let avatar projectiles fight hazards."""
        context.critical = select_critical_entities(self._analyzer, context, rng, self._config)
        enemy = context.critical.enemy_npc

        for avatar in self._avatars:
            for projectile in avatar.children:
                for harmful in context.harmful_objects:
                    context.kill(harmful, projectile, score_change=1)
                    context.kill(projectile, harmful)

                for npc in context.harmful_npcs:
                    context.kill(npc, projectile, score_change=2 if npc == enemy else 1)
                    context.kill(projectile, npc)

                if rng.random() < self._prob.kill_resource:
                    for resource in self._resources:
                        context.kill(projectile, resource.name)
                        if rng.random() < self._prob.kill_resource_score:
                            context.kill(resource.name, projectile, score_change=1)
                        else:
                            context.kill(resource.name, projectile, score_change=-1)
