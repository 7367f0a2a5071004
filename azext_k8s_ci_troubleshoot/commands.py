# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for license information.
# --------------------------------------------------------------------------------------------


def load_command_table(self, _):
    with self.command_group('k8s-ci-troubleshoot') as g:
        g.custom_command('onboarding', 'troubleshoot_onboarding')
        g.custom_command('transport', 'verify_transport')
