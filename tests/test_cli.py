import json

import yaml

from reelstack.cli import main


def test_synth_writes_template(isolated_env, capsys):
    code = main(["synth", "--vpc-id", "vpc-cli", "--stack-name", "prod"])
    assert code == 0
    template = yaml.safe_load((isolated_env / "build" / "prod.template.yaml").read_text())
    assert template["Resources"]["MainApiServiceTargetGroup"]["Properties"]["VpcId"] == "vpc-cli"
    assert "All actions completed" in capsys.readouterr().out


def test_synth_json_manifest(isolated_env):
    code = main(["synth", "--vpc-id", "vpc-cli", "--renderer", "manifest",
                 "--format", "json", "--output-dir", "dist"])
    assert code == 0
    manifest = json.loads((isolated_env / "dist" / "EcsServicesStack.template.json").read_text())
    assert manifest["identity"] == "EcsServicesStack"


def test_synth_dry_run(isolated_env):
    assert main(["synth", "--vpc-id", "vpc-cli", "--dry-run"]) == 0
    assert not (isolated_env / "build").exists()


def test_missing_vpc_is_an_error(isolated_env, capsys):
    assert main(["synth"]) == 1
    assert "No vpc_id configured" in capsys.readouterr().err


def test_vpc_from_environment(isolated_env, monkeypatch, capsys):
    monkeypatch.setenv("REELSTACK_VPC_ID", "vpc-env")
    assert main(["list"]) == 0
    out = capsys.readouterr().out
    assert "ReelQuotesCluster" in out
    assert "reelquotes-main-api" in out
    assert "SubtitleApiService" in out


def test_outputs_command(isolated_env, capsys):
    assert main(["outputs", "--vpc-id", "vpc-cli"]) == 0
    out = capsys.readouterr().out
    assert "MainApiALBDns" in out
    assert "= ${MainApiServiceLB.DNSName}" in out
    assert "ECR repository URI for reelquotes-main-api" in out


def test_init_then_reuse(isolated_env, capsys):
    assert main(["init", "--vpc-id", "vpc-init"]) == 0
    saved = yaml.safe_load((isolated_env / "reelstack.yaml").read_text())
    assert saved["vpc_id"] == "vpc-init"

    assert main(["init"]) == 1
    assert "already exists" in capsys.readouterr().out

    assert main(["outputs"]) == 0


def test_explicit_config_file(isolated_env, tmp_path):
    config_file = tmp_path / "stack.yaml"
    config_file.write_text("vpc_id: vpc-file\nstack_name: staging\n")
    assert main(["--config", str(config_file), "synth"]) == 0
    assert (isolated_env / "build" / "staging.template.yaml").exists()


def test_init_creates_explicit_config_file(isolated_env, tmp_path):
    target = tmp_path / "custom.yaml"
    assert main(["--config", str(target), "init", "--vpc-id", "vpc-x"]) == 0
    assert yaml.safe_load(target.read_text())["vpc_id"] == "vpc-x"
    assert not (isolated_env / "reelstack.yaml").exists()

    assert main(["--config", str(target), "outputs"]) == 0


def test_init_refuses_to_shadow_hidden_config(isolated_env, capsys):
    (isolated_env / ".reelstack.yaml").write_text("vpc_id: vpc-hidden\n")
    assert main(["init"]) == 1
    assert ".reelstack.yaml already exists" in capsys.readouterr().out
    assert not (isolated_env / "reelstack.yaml").exists()

    assert main(["init", "--force", "--vpc-id", "vpc-new"]) == 0


def test_null_output_dir_is_reported(isolated_env, capsys):
    (isolated_env / "reelstack.yaml").write_text("output_dir: null\n")
    assert main(["synth", "--vpc-id", "vpc-1"]) == 1
    assert "output_dir" in capsys.readouterr().err


def test_synth_warns_without_certificate(isolated_env, capsys):
    assert main(["synth", "--vpc-id", "vpc-1", "--dry-run"]) == 0
    assert "No certificate_arn configured" in capsys.readouterr().out

    assert main(["synth", "--vpc-id", "vpc-1", "--dry-run",
                 "--certificate-arn", "arn:aws:acm:eu-west-1:1:certificate/x"]) == 0
    assert "No certificate_arn configured" not in capsys.readouterr().out
