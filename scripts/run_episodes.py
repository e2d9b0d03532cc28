"""
Run foraging episodes over the bundled data pack and report totals.

Examples:
    python scripts/run_episodes.py --policy seek --config gameplay --steps 500
    python scripts/run_episodes.py --policy random --episodes 20 --seed 4
    python scripts/run_episodes.py --policy heuristic --commands forward,up --steps 200
"""

import argparse
import json
from pathlib import Path

from hummingbird.agent import HEURISTIC_COMMANDS
from hummingbird.loader import load_all_data
from hummingbird.policy import HeuristicPolicy, RandomPolicy, SeekNectarPolicy
from hummingbird.rng import make_rng
from hummingbird.simulation import ForagingSimulation

DATA_ROOT = Path(__file__).parent.parent / "data"


def build_policy(args, sim: ForagingSimulation):
    if args.policy == 'random':
        return RandomPolicy(make_rng(sim.seed, "policy"))
    if args.policy == 'heuristic':
        commands = [c for c in args.commands.split(',') if c]
        unknown = set(commands) - HEURISTIC_COMMANDS
        if unknown:
            raise SystemExit(f"Unknown commands: {', '.join(sorted(unknown))}")
        policy = HeuristicPolicy(sim.agent)
        policy.press(commands)
        return policy
    return SeekNectarPolicy()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run hummingbird foraging episodes")
    parser.add_argument('--policy', choices=['seek', 'random', 'heuristic'], default='seek')
    parser.add_argument('--commands', default='forward',
                        help="Comma-separated held commands for the heuristic policy")
    parser.add_argument('--config', default='training', help="Config name under data/config")
    parser.add_argument('--scene', default='flower_area', help="Scene name under data/scenes")
    parser.add_argument('--data-root', type=Path, default=DATA_ROOT)
    parser.add_argument('--episodes', type=int, default=3)
    parser.add_argument('--steps', type=int, default=None,
                        help="Step cap per episode (required for gameplay configs)")
    parser.add_argument('--seed', type=int, default=None)
    parser.add_argument('--json', action='store_true', help="Print summaries as JSON lines")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    schema_dir = args.data_root / "schemas"

    data = load_all_data(args.data_root, schema_dir, scene_name=args.scene, config_name=args.config)
    sim = ForagingSimulation(scene=data['scene'], config=data['config'], seed=args.seed)
    policy = build_policy(args, sim)

    print("=" * 60)
    print(f"Foraging run: policy={args.policy}, config={args.config}, episodes={args.episodes}")
    print("=" * 60)

    summaries = []
    for _ in range(args.episodes):
        summary = sim.run_episode(policy, max_steps=args.steps)
        summaries.append(summary)
        if args.json:
            print(json.dumps(summary.to_dict()))
        else:
            print(f"Episode {summary.episode}: steps={summary.steps}, "
                  f"nectar={summary.nectar_obtained:.2f}, reward={summary.cumulative_reward:.3f}")

    stats = sim.get_tick_stats()
    total_nectar = sum(s.nectar_obtained for s in summaries)
    print()
    print(f"[OK] {len(summaries)} episodes, {stats['tick_count']} ticks, "
          f"nectar={total_nectar:.2f}, avg_tick={stats['avg_tick_ms']:.3f}ms")


if __name__ == '__main__':
    main()
