"""Simulation configuration with sensible defaults."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SimulationConfig:
    """Immutable configuration for the simulation run.

    Distances are world pixels, speeds pixels per second and durations
    milliseconds of simulated time.
    """

    # World
    world_seed: int = 42
    start_level: str = "chamber"

    # Timing
    tick_delta_ms: float = 1000.0 / 60.0   # Fixed delta for headless runs
    max_ticks: int = 20000

    # Inventory
    inventory_capacity: int = 24
    default_max_stack: int = 99

    # Enemy AI
    engage_range: float = 30.0              # Stop and attack below this distance
    lose_target_mult: float = 1.5           # CHASE -> PATROL beyond chase_distance * mult
    enemy_attack_cooldown_ms: float = 1000.0
    enemy_hit_window_ms: float = 200.0      # isHit flag + knockback stun on enemies
    enemy_knockback_speed: float = 200.0
    enemy_size: float = 24.0
    default_enemy_damage: int = 10

    # Player
    player_size: float = 24.0
    player_invulnerable_ms: float = 1000.0
    player_hit_stun_ms: float = 300.0
    contact_knockback_speed: float = 300.0
    mana_regen_interval_ms: float = 1000.0
    mana_regen_fraction: float = 0.01
    mana_regen_min: float = 0.1

    # Melee
    melee_offset: float = 30.0
    melee_size: float = 48.0
    melee_lifetime_ms: float = 100.0

    # Ranged
    ranged_mana_cost: float = 10.0
    ranged_speed: float = 400.0
    ranged_radius: float = 16.0
    ranged_lifetime_ms: float = 1500.0
    moving_threshold: float = 10.0          # Velocity component that counts as "moving"

    # World items
    item_size: float = 24.0
    item_pickup_delay_ms: float = 300.0
    item_despawn_ms: float = 60000.0
    scripted_drop_offset: float = 20.0      # X offset for med/energy kit drops

    # Leveling
    xp_per_level_scale: float = 1.5
    stat_growth_hp: int = 10
    stat_growth_attack: int = 2
    stat_growth_defense: int = 1

    # Persistence
    default_unlocked_level: str = "chamber"

    # Logging
    log_level: str = "INFO"
    replay_file: str = "replay.json"
