import os

from aws_cdk import App, Aspects, Environment, Tags
from cdk_nag import AwsSolutionsChecks

from cdk.app_stack import AppStack
from constants import ENV_CONFIG, PREFIX

app = App()

stage = os.getenv("ENV", "dev")
config = ENV_CONFIG.get(stage)

if config is None:
    raise ValueError(f"Environment '{stage}' is not defined in constants.py")

environment = Environment(account=config["account"], region=config["region"])

# Advanced and basic items APIs plus the connectivity check
AppStack(
    app,
    f"{PREFIX}-{stage}",
    stage=stage,
    table_name=PREFIX,
    env=environment,
)

Tags.of(app).add("Environment", stage)
Tags.of(app).add("Project", PREFIX)

Aspects.of(app).add(AwsSolutionsChecks())

app.synth()
