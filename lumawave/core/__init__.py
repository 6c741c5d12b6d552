"""ECS core: arena, world, systems and pipelines."""
