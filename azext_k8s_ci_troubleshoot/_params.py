# --------------------------------------------------------------------------------------------
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See License.txt in the project root for license information.
# --------------------------------------------------------------------------------------------


def load_arguments(self, _):
    with self.argument_context('k8s-ci-troubleshoot onboarding') as c:
        c.argument('resource_id', options_list=['--resource-id'],
                   help='Fully qualified resource ID of the Azure Arc enabled Kubernetes cluster.')
        c.argument('kube_context', options_list=['--kube-context'],
                   help='Name of the kube context. The current context is used if not set.')
        c.argument('json_report', options_list=['--json-report'],
                   help='Path to save JSON troubleshooting report.')
        c.argument('log_file', options_list=['--log-file'],
                   help='Path of the log file every diagnostic message is appended to. '
                        'Default: TroubleshootDump.log')

    with self.argument_context('k8s-ci-troubleshoot transport') as c:
        c.argument('settings_file', options_list=['--settings-file'],
                   help='Path of the key=value agent settings file declaring cert_file_path, '
                        'key_file_path and omsproxy_conf_path.')
