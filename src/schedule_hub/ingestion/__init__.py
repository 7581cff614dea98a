"""Slack message ingestion: conversion rules and the sync pipeline."""

from schedule_hub.ingestion.converter import build_deep_link, convert_message
from schedule_hub.ingestion.pipeline import SyncPipeline, SyncResult

__all__ = ["SyncPipeline", "SyncResult", "build_deep_link", "convert_message"]
