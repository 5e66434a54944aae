# rl/train_ppo.py
"""
Train a PPO agent on PlantGrowthEnv.

Quick smoke run:   python -m rl.train_ppo --demo
Full run:          python -m rl.train_ppo --timesteps 300000
"""

import argparse
import logging
import os

import torch.nn as nn
from stable_baselines3 import PPO
from stable_baselines3.common.callbacks import BaseCallback, CallbackList, CheckpointCallback, EvalCallback
from stable_baselines3.common.utils import set_random_seed

from config import load_config
from rl.wrappers import make_env

logger = logging.getLogger(__name__)


class PlantStatsCallback(BaseCallback):
    """Log seeds produced and end cause of each finished training episode."""

    def __init__(self, verbose=0):
        super().__init__(verbose)
        self.episodes = []

    def _on_step(self) -> bool:
        for info in self.locals.get('infos', []):
            stats = info.get('plant_episode')
            if stats is None:
                continue
            self.episodes.append(stats)
            self.logger.record('plant/seeds_produced', stats['seeds_produced'])
            self.logger.record('plant/final_health', stats['final_health'])
            if self.verbose > 0:
                logger.info("Episode %d: seeds=%s health=%.1f end=%s", len(self.episodes),
                            stats['seeds_produced'], stats['final_health'], stats['end_reason'])
        return True


def build_ppo_kwargs(env, cfg, demo=False, tensorboard_log=None):
    # --- PPO HYPERPARAMETERS ---
    ppo_kwargs = {
        'policy': 'MlpPolicy',
        'env': env,
        'verbose': 1,
        'learning_rate': 3e-4,
        'n_steps': 1024,
        'batch_size': 64,
        'n_epochs': 10,
        'gamma': 0.995,
        'gae_lambda': 0.95,
        'clip_range': 0.2,
        'ent_coef': 0.01,
        'vf_coef': 0.5,
        'max_grad_norm': 0.5,
        'tensorboard_log': tensorboard_log,
        'device': 'auto',
        'seed': cfg.get('seed'),
        'policy_kwargs': {
            'net_arch': dict(pi=[128, 128], vf=[128, 128]),
            'activation_fn': nn.Tanh,
        },
    }
    # config file may override individual PPO params
    ppo_kwargs.update(cfg.get('ppo') or {})
    if demo:
        ppo_kwargs['n_steps'] = 256
        ppo_kwargs['batch_size'] = 32
    return ppo_kwargs


def train(cfg, timesteps, demo=False, out_dir='.', use_wrappers=True):
    if cfg.get('seed') is not None:
        set_random_seed(cfg['seed'])

    env = make_env(cfg=cfg, use_wrappers=use_wrappers)
    eval_env = make_env(cfg=cfg, use_wrappers=False)

    callbacks = [PlantStatsCallback(verbose=1)]
    callbacks.append(EvalCallback(
        eval_env,
        best_model_save_path=os.path.join(out_dir, 'ppo_best'),
        log_path=os.path.join(out_dir, 'ppo_logs'),
        eval_freq=max(500, timesteps // 20),
        deterministic=True,
        render=False,
    ))
    callbacks.append(CheckpointCallback(
        save_freq=max(5000, timesteps // 10),
        save_path=os.path.join(out_dir, 'ppo_checkpoints'),
        name_prefix='ppo_model',
    ))

    tb = None if demo else os.path.join(out_dir, 'ppo_tensorboard')
    model = PPO(**build_ppo_kwargs(env, cfg, demo=demo, tensorboard_log=tb))
    logger.info("Training PPO for %d timesteps (demo=%s)", timesteps, demo)
    model.learn(total_timesteps=timesteps, callback=CallbackList(callbacks))

    path = os.path.join(out_dir, 'ppo_demo' if demo else 'ppo_full')
    model.save(path)
    logger.info("Saved model to %s.zip", path)
    return model


def main(args):
    cfg = load_config(args.config)
    if args.timesteps is None:
        args.timesteps = 2000 if args.demo else 300000
    os.makedirs(args.out_dir, exist_ok=True)
    return train(cfg, args.timesteps, demo=args.demo, out_dir=args.out_dir,
                 use_wrappers=not args.no_wrappers)


def build_parser(parser=None):
    parser = parser or argparse.ArgumentParser(description='Train PPO on PlantGrowthEnv')
    parser.add_argument('--demo', action='store_true', help='Run quick 2k step demo')
    parser.add_argument('--config', type=str, default=None, help='Config file path')
    parser.add_argument('--timesteps', type=int, default=None, help='Total training timesteps')
    parser.add_argument('--no_wrappers', action='store_true', help='Disable reward scaling wrappers')
    parser.add_argument('--out_dir', type=str, default='.', help='Where models and logs are written')
    return parser


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(name)s: %(message)s')
    main(build_parser().parse_args())
