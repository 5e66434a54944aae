# rl/wrappers.py
"""
PPO-ready wrappers for PlantGrowthEnv.

Observations are already bounded to [0, 1], so only reward scaling and
episode bookkeeping are layered on top.
"""

import gymnasium as gym
from stable_baselines3.common.monitor import Monitor


class ScaleReward(gym.RewardWrapper):
    """Scale rewards to a range PPO copes with."""
    def __init__(self, env, scale=0.1):
        super().__init__(env)
        self.scale = scale

    def reward(self, reward):
        return float(reward * self.scale)


class EpisodeStats(gym.Wrapper):
    """Attach plant outcomes (seeds, final health, end cause) to the last info of an episode."""
    def __init__(self, env):
        super().__init__(env)
        self.episode_reward = 0.0
        self.episode_length = 0

    def reset(self, **kwargs):
        self.episode_reward = 0.0
        self.episode_length = 0
        return self.env.reset(**kwargs)

    def step(self, action):
        obs, reward, terminated, truncated, info = self.env.step(action)
        self.episode_reward += reward
        self.episode_length += 1

        if terminated or truncated:
            if info.get('life_complete'):
                end_reason = 'life_complete'
            elif info.get('health', 1.0) <= 0:
                end_reason = 'plant_died'
            else:
                end_reason = 'time_limit'
            info['plant_episode'] = {
                'r': self.episode_reward,
                'l': self.episode_length,
                'seeds_produced': info.get('seeds_produced', 0),
                'final_health': info.get('health', 0.0),
                'end_reason': end_reason,
            }
        return obs, reward, terminated, truncated, info


def make_env(cfg=None, use_wrappers=True, reward_scale=0.1):
    """Factory function to create and wrap environment."""
    from rl.gym_env import PlantGrowthEnv

    env = PlantGrowthEnv(cfg=cfg)
    if use_wrappers:
        env = EpisodeStats(env)
        env = ScaleReward(env, scale=reward_scale)
    return Monitor(env)
